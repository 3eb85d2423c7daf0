"""
Sunrise / sunset calculator on top of astral.

Polar days/nights (astral raises ValueError when the sun never crosses the
horizon) are reported through ``SunTimes.polar`` instead: the sun's
elevation at solar noon tells which of the two it is.
"""
from __future__ import annotations
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Literal, Optional

from astral import Observer
from astral.sun import elevation, noon, sunrise, sunset

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class SunTimes:
    sunrise: Optional[dt.datetime]
    sunset: Optional[dt.datetime]   # always the sunset following ``sunrise``
    polar: Optional[Literal['day', 'night']] = None   # 'day' = sun never sets

    @property
    def is_polar(self) -> bool:
        return self.polar is not None

def _check_coordinates(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"latitude out of range: {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"longitude out of range: {longitude}")

def polar_kind(observer: Observer, day: dt.date) -> Literal['day', 'night']:
    """'day' if the sun stays up through ``day``, else 'night'."""
    transit = noon(observer, day, tzinfo=dt.timezone.utc)
    return 'day' if elevation(observer, transit) > 0 else 'night'

def sun_times(latitude: float, longitude: float, day: dt.date, tz: dt.tzinfo | None = None) -> SunTimes:
    """Sunrise on ``day`` and the sunset after it, as aware datetimes in ``tz`` (system local zone if None)."""
    _check_coordinates(latitude, longitude)
    tz = tz or dt.datetime.now().astimezone().tzinfo
    observer = Observer(latitude=latitude, longitude=longitude)
    try:
        rise = sunrise(observer, day, tzinfo=tz)
        sset = sunset(observer, day, tzinfo=tz)
        if sset <= rise:
            # zone far from the longitude: that date's sunset belongs to the previous span
            sset = sunset(observer, day + dt.timedelta(days=1), tzinfo=tz)
    except ValueError as e:
        kind = polar_kind(observer, day)
        log.debug("No sunrise/sunset on %s at lat=%.3f (%s): polar %s", day, latitude, e, kind)
        return SunTimes(None, None, kind)
    return SunTimes(rise, sset)
