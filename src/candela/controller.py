import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Optional

from candela.config import Temperature
from candela.exceptions import CommandError
from candela.schedule import Phase
from candela.transition import Reading

log = logging.getLogger(__name__)

@dataclass
class State:
    temperature: Optional[int] = None     # last value the setter accepted
    phase: Optional[Phase] = None
    target: Optional[float] = None
    raw_progress: float = 0.0
    eased_progress: float = 0.0
    paused: bool = False
    override: Optional[int] = None
    last_applied: Optional[int] = None
    ticks: int = 0
    last_tick_at: Optional[float] = None

class Controller:
    """
    Sole owner of the runtime State. The daemon loop and the control commands
    both go through these methods; a lock keeps them atomic if a caller
    drives them from separate threads.
    """
    def __init__(self, temperature: Temperature):
        self.bounds = temperature.bounds
        self.s = State()
        self._lock = threading.Lock()

    # commands
    def pause(self) -> None:
        with self._lock:
            self.s.paused = True
            frozen = self.s.temperature
        log.info("Paused at %s", frozen)

    def resume(self) -> None:
        with self._lock:
            self.s.paused = False
            self.s.override = None
        log.info("Resumed automatic schedule")

    def set(self, value) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise CommandError(f"temperature must be an integer Kelvin value, got {value!r}")
        lo, hi = self.bounds
        if value <= 0:
            raise CommandError(f"temperature must be positive, got {value}")
        if not lo <= value <= hi:
            raise CommandError(f"temperature {value}K outside configured range {lo}-{hi}K")
        with self._lock:
            self.s.override = value
            self.s.target = float(value)
            self.s.raw_progress = self.s.eased_progress = 1.0
        log.info("Override set to %dK", value)

    def clear_override(self) -> None:
        with self._lock:
            self.s.override = None

    def query(self) -> State:
        with self._lock:
            return replace(self.s)

    # loop bookkeeping
    def automatic(self) -> bool:
        """True when this tick should recompute the target from the schedule."""
        with self._lock:
            return not self.s.paused and self.s.override is None

    def apply_reading(self, reading: Reading) -> None:
        with self._lock:
            self.s.phase = reading.phase
            self.s.target = reading.target
            self.s.raw_progress = reading.raw_progress
            self.s.eased_progress = reading.eased_progress

    def desired_output(self) -> Optional[int]:
        """Kelvin to send this tick, or None while paused without an override."""
        with self._lock:
            if self.s.override is not None:
                return self.s.override
            if self.s.paused or self.s.target is None:
                return None
            return int(round(self.s.target))

    def record_applied(self, value: int) -> None:
        with self._lock:
            self.s.last_applied = value
            self.s.temperature = value

    def count_tick(self) -> int:
        with self._lock:
            self.s.ticks += 1
            self.s.last_tick_at = time.time()
            return self.s.ticks

    # persistence
    def restore(self, saved: dict) -> None:
        """Take paused/override/last-applied from a persisted snapshot."""
        paused = bool(saved.get('paused', False))
        override = saved.get('override')
        last = saved.get('last_applied')
        if override is not None:
            try:
                self.set(override)
            except CommandError as e:
                log.warning("Ignoring persisted override: %s", e)
        lo, hi = self.bounds
        if last is not None and (isinstance(last, bool) or not isinstance(last, int) or not lo <= last <= hi):
            log.warning("Ignoring persisted temperature %r outside configured range %s-%sK", last, lo, hi)
            last = None
        with self._lock:
            self.s.paused = paused
            if last is not None:
                self.s.temperature = last
        # last_applied is left empty so the first tick re-sends the value

    def persistable(self) -> dict:
        with self._lock:
            return {'paused': self.s.paused, 'override': self.s.override, 'last_applied': self.s.temperature}
