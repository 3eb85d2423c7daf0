from __future__ import annotations
import datetime as dt, os
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

Easing = Literal['linear', 'ease_in', 'ease_out', 'ease_in_out']

def parse_hhmm(value: str) -> dt.time:
    try:
        return dt.datetime.strptime(value.strip(), '%H:%M').time()
    except (AttributeError, ValueError):
        raise ValueError(f"expected HH:MM, got {value!r}") from None

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

class Location(_Frozen):
    latitude: float = Field(0.0, ge=-90.0, le=90.0)
    longitude: float = Field(0.0, ge=-180.0, le=180.0)

class Schedule(_Frozen):
    wakeup: str = '07:00'   # HH:MM local
    bedtime: str = '22:00'

    @field_validator('wakeup', 'bedtime', mode='before')
    @classmethod
    def _check_time(cls, v) -> str:
        if isinstance(v, int) and not isinstance(v, bool):
            # YAML 1.1 reads an unquoted 22:00 as sexagesimal 1320
            v = f"{v // 60:02d}:{v % 60:02d}"
        if not isinstance(v, str):
            raise ValueError(f"expected HH:MM, got {v!r}")
        return parse_hhmm(v).strftime('%H:%M')

    @property
    def wakeup_time(self) -> dt.time: return parse_hhmm(self.wakeup)
    @property
    def bedtime_time(self) -> dt.time: return parse_hhmm(self.bedtime)

class Transition(_Frozen):
    duration_minutes: int = Field(60, gt=0)
    easing: Easing = 'ease_in_out'

class Temperature(_Frozen):
    day: int = Field(6500, gt=0)    # Kelvin
    night: int = Field(1500, gt=0)

    @property
    def bounds(self) -> tuple[int, int]:
        return min(self.day, self.night), max(self.day, self.night)

class Daemon(_Frozen):
    tick_interval_seconds: float = Field(5, gt=0)
    optimize_updates: bool = True
    status_update_interval: int = Field(1, ge=0)  # 0 = every tick
    status_file: str = '/tmp/candela.status'
    state_file: str = '~/.cache/candela/state.yaml'
    setter_timeout_seconds: float = Field(5, gt=0)

    @property
    def control_file(self) -> str:
        root, _ = os.path.splitext(self.status_file)
        return root + '.control'

class Setter(_Frozen):
    command: list[str] = Field(default_factory=lambda: ['hyprctl', 'hyprsunset', 'temperature'], min_length=1)
    backend: str = 'hyprsunset'  # process kept running by the daemon; '' disables

class LoggingSettings(_Frozen):
    enabled: bool = True
    level: str = 'INFO'
    file: Optional[str] = None

class Configuration(_Frozen):
    mode: Literal['auto', 'fixed'] = 'auto'
    location: Location = Field(default_factory=Location)
    schedule: Schedule = Field(default_factory=Schedule)
    transition: Transition = Field(default_factory=Transition)
    temperature: Temperature = Field(default_factory=Temperature)
    daemon: Daemon = Field(default_factory=Daemon)
    setter: Setter = Field(default_factory=Setter)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

# env var -> dotted config key
ENV_MAP: dict[str, str] = {
    'CANDELA_MODE': 'mode',
    'CANDELA_LATITUDE': 'location.latitude',
    'CANDELA_LONGITUDE': 'location.longitude',
    'CANDELA_WAKEUP': 'schedule.wakeup',
    'CANDELA_BEDTIME': 'schedule.bedtime',
    'CANDELA_TRANSITION_DURATION': 'transition.duration_minutes',
    'CANDELA_EASING': 'transition.easing',
    'CANDELA_DAY_TEMP': 'temperature.day',
    'CANDELA_NIGHT_TEMP': 'temperature.night',
    'CANDELA_TICK_INTERVAL': 'daemon.tick_interval_seconds',
    'CANDELA_OPTIMIZE_UPDATES': 'daemon.optimize_updates',
    'CANDELA_STATUS_UPDATE_INTERVAL': 'daemon.status_update_interval',
    'CANDELA_STATUS_FILE': 'daemon.status_file',
    'CANDELA_STATE_FILE': 'daemon.state_file',
}

def apply_env(data: dict, environ) -> dict:
    """Overlay environment overrides onto raw config data (env wins)."""
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in (data or {}).items()}
    for var, key in ENV_MAP.items():
        raw = environ.get(var)
        if raw is None:
            continue
        value: object = raw.strip()
        if var == 'CANDELA_MODE' or var == 'CANDELA_EASING':
            value = str(value).lower()
        elif var == 'CANDELA_OPTIMIZE_UPDATES':
            value = str(value).lower() not in ('0', 'false', 'no', 'off')
        section, _, field = key.partition('.')
        if not field:
            out[section] = value
        else:
            sub = out.get(section)
            if not isinstance(sub, dict):
                sub = {}
            sub[field] = value
            out[section] = sub
    return out
