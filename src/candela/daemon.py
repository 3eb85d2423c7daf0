from __future__ import annotations
import datetime as dt
import logging
import threading
import time
from typing import Callable, Optional

from candela.config import Configuration
from candela.control import ControlChannel, parse_command
from candela.controller import Controller
from candela.exceptions import CommandError, SetterError
from candela.setter import TemperatureSetter
from candela.status import StateStore, StatusWriter
from candela.transition import TransitionEngine

log = logging.getLogger(__name__)

POLL_S = 0.25

def should_send(optimize_updates: bool, last_sent: Optional[int], value: int) -> bool:
    if not optimize_updates:
        return True
    return last_sent is None or last_sent != value

def _local_now() -> dt.datetime:
    return dt.datetime.now().astimezone()

class DaemonLoop:
    """
    Tick loop: recompute (unless paused/overridden), push to the setter when
    needed, publish status. Control commands are polled between ticks on the
    same thread, so they never interleave with a tick.
    """
    def __init__(self, cfg: Configuration, ctrl: Controller, setter: TemperatureSetter,
                 status: StatusWriter, state_store: StateStore | None = None,
                 channel: ControlChannel | None = None,
                 clock: Callable[[], dt.datetime] = _local_now):
        self.cfg = cfg; self.ctrl = ctrl; self.setter = setter
        self.status = status; self.state_store = state_store; self.channel = channel
        self.engine = TransitionEngine(cfg)
        self.clock = clock
        self._stop = threading.Event()

    # one tick
    def _step(self, now: dt.datetime | None = None) -> None:
        if self.ctrl.automatic():
            reading = self.engine.compute(now or self.clock())
            self.ctrl.apply_reading(reading)
            log.debug("Phase: %s, Target: %.0f, Progress: %.2f (eased %.2f)",
                      reading.phase.value, reading.target, reading.raw_progress, reading.eased_progress)
        value = self.ctrl.desired_output()
        if value is None:
            return
        if not should_send(self.cfg.daemon.optimize_updates, self.ctrl.query().last_applied, value):
            return
        try:
            self.setter.apply(value)
        except SetterError as e:
            # retried on the next tick since last_applied is unchanged
            log.error("Error setting temperature: %s", e)
            return
        self.ctrl.record_applied(value)
        log.info("Set temperature to %dK", value)

    def tick(self, now: dt.datetime | None = None) -> None:
        self._step(now)
        n = self.ctrl.query().ticks + 1
        every = self.cfg.daemon.status_update_interval
        if every == 0 or n % every == 0:
            self.publish()
        self.ctrl.count_tick()

    def publish(self) -> None:
        try:
            self.status.write(self.ctrl.query())
        except OSError as e:
            log.error("Could not write status file %s: %s", self.status.path, e)

    def save_state(self) -> None:
        if self.state_store is None:
            return
        try:
            self.state_store.save(self.ctrl.persistable())
        except OSError as e:
            log.warning("Could not save state to %s: %s", self.state_store.path, e)

    # commands
    def handle(self, line: str) -> None:
        """Apply one control command; raises CommandError on a bad line."""
        name, value = parse_command(line)
        if name == 'pause':
            self.ctrl.pause()
        elif name == 'resume':
            self.ctrl.resume()
        else:
            self.ctrl.set(value)

    def process_commands(self) -> bool:
        if self.channel is None:
            return False
        lines = self.channel.drain()
        applied = False
        for line in lines:
            try:
                self.handle(line)
                applied = True
            except CommandError as e:
                log.warning("Rejected control command %r: %s", line, e)
        if applied:
            # act now rather than at the next tick; not counted as a tick
            self._step()
            self.publish()
            self.save_state()
        return applied

    # lifecycle
    def restore(self) -> None:
        if self.state_store is None:
            return
        saved = self.state_store.load()
        if saved:
            log.info("Restoring saved state (paused=%s, override=%s)", saved.get('paused'), saved.get('override'))
            self.ctrl.restore(saved)

    def stop(self, *_args) -> None:
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def run(self) -> None:
        interval = float(self.cfg.daemon.tick_interval_seconds)
        log.info("Starting candela daemon (mode=%s, tick=%ss)", self.cfg.mode, interval)
        next_tick = time.monotonic()
        try:
            while not self._stop.is_set():
                self.process_commands()
                now = time.monotonic()
                if now >= next_tick:
                    self.tick()
                    next_tick = now + interval
                self._stop.wait(max(0.0, min(POLL_S, next_tick - time.monotonic())))
        finally:
            log.info("Shutting down, saving state.")
            self.save_state()
