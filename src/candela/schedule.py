from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import datetime as dt
import logging

from candela.config import Configuration
from candela.solar import sun_times

log = logging.getLogger(__name__)

class Phase(str, Enum):
    DAY = 'day'
    NIGHT = 'night'
    TO_DAY = 'transitioning_to_day'
    TO_NIGHT = 'transitioning_to_night'

    @property
    def in_transition(self) -> bool:
        return self in (Phase.TO_DAY, Phase.TO_NIGHT)

@dataclass(frozen=True)
class Span:
    """One daylight span: from sunrise/wakeup to the following sunset/bedtime."""
    rise: dt.datetime
    set: dt.datetime

    def contains(self, when: dt.datetime) -> bool:
        return self.rise <= when < self.set

def fixed_span(day: dt.date, wakeup: dt.time, bedtime: dt.time, tz: Optional[dt.tzinfo]) -> Span:
    rise = dt.datetime.combine(day, wakeup, tzinfo=tz)
    sset = dt.datetime.combine(day, bedtime, tzinfo=tz)
    if sset <= rise:
        # bedtime past midnight
        sset += dt.timedelta(days=1)
    return Span(rise, sset)

def resolve_in_span(when: dt.datetime, span: Span, duration: dt.timedelta) -> Tuple[Phase, float]:
    """Phase and raw progress for a moment inside a daylight span.

    The ToDay window opens at the span start, the ToNight window closes at the
    span end. Both are shrunk to half the span when they would overlap.
    """
    width = min(duration, (span.set - span.rise) / 2)
    if width <= dt.timedelta(0):
        return Phase.DAY, 1.0
    if when < span.rise + width:
        return Phase.TO_DAY, _fraction(when - span.rise, width)
    to_night_start = span.set - width
    if when >= to_night_start:
        return Phase.TO_NIGHT, _fraction(when - to_night_start, width)
    return Phase.DAY, 1.0

def _fraction(elapsed: dt.timedelta, width: dt.timedelta) -> float:
    return max(0.0, min(1.0, elapsed / width))

class PhaseResolver:
    """Maps wall-clock time to (phase, raw progress) for the configured mode."""

    def __init__(self, cfg: Configuration):
        self.cfg = cfg
        self.duration = dt.timedelta(minutes=cfg.transition.duration_minutes)

    def span_for(self, day: dt.date, tz: Optional[dt.tzinfo]) -> Optional[Span]:
        """Daylight span starting on ``day``; None on a polar day or night."""
        if self.cfg.mode == 'fixed':
            return fixed_span(day, self.cfg.schedule.wakeup_time, self.cfg.schedule.bedtime_time, tz)
        loc = self.cfg.location
        st = sun_times(loc.latitude, loc.longitude, day, tz)
        if st.is_polar:
            return None
        return Span(st.sunrise, st.sunset)

    def resolve(self, now: dt.datetime) -> Tuple[Phase, float]:
        if now.tzinfo is None:
            now = now.astimezone()
        tz = now.tzinfo
        today = now.date()
        if self.cfg.mode == 'auto':
            loc = self.cfg.location
            polar = sun_times(loc.latitude, loc.longitude, today, tz).polar
            if polar is not None:
                log.debug("Polar %s at lat=%.3f", polar, loc.latitude)
                return (Phase.DAY if polar == 'day' else Phase.NIGHT), 1.0
        for offset in (-1, 0, 1):
            span = self.span_for(today + dt.timedelta(days=offset), tz)
            if span is not None and span.contains(now):
                return resolve_in_span(now, span, self.duration)
        return Phase.NIGHT, 1.0
