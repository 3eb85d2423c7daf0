from __future__ import annotations
from dataclasses import dataclass
import datetime as dt

from candela.config import Configuration
from candela.easing import ease
from candela.schedule import Phase, PhaseResolver

@dataclass(frozen=True)
class Reading:
    """Result of one automatic computation."""
    phase: Phase
    raw_progress: float
    eased_progress: float
    target: float   # Kelvin, unrounded

def interpolate(phase: Phase, eased: float, day: float, night: float) -> float:
    if phase is Phase.DAY:
        value = float(day)
    elif phase is Phase.NIGHT:
        value = float(night)
    elif phase is Phase.TO_DAY:
        value = night + (day - night) * eased
    else:
        value = day + (night - day) * eased
    lo, hi = min(day, night), max(day, night)
    return max(float(lo), min(float(hi), value))

class TransitionEngine:
    """PhaseResolver -> easing -> interpolation."""

    def __init__(self, cfg: Configuration):
        self.cfg = cfg
        self.resolver = PhaseResolver(cfg)

    def compute(self, now: dt.datetime) -> Reading:
        phase, raw = self.resolver.resolve(now)
        eased = ease(self.cfg.transition.easing, raw)
        t = self.cfg.temperature
        return Reading(phase, raw, eased, interpolate(phase, eased, t.day, t.night))
