from __future__ import annotations
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from candela.controller import State

log = logging.getLogger(__name__)

def expand(path: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(path)))

def atomic_write(path: Path, text: str) -> None:
    """Write to a sibling temp file and rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w') as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise

def render_status(s: State) -> str:
    phase = 'manual' if s.override is not None else (s.phase.value if s.phase is not None else 'unknown')
    target = int(round(s.target)) if s.target is not None else 0
    lines = [
        f"temp={s.temperature if s.temperature is not None else 0}",
        f"phase={phase}",
        f"target={target}",
        f"progress={s.raw_progress:.2f}",
    ]
    if s.paused:
        lines.append("paused=1")
    return "\n".join(lines) + "\n"

class StatusWriter:
    def __init__(self, path: str):
        self.path = expand(path)

    def write(self, s: State) -> None:
        atomic_write(self.path, render_status(s))

def read_status(path: str) -> Dict[str, Any]:
    """Parse a status file; missing file or fields give neutral defaults."""
    out: Dict[str, Any] = {'temp': 0, 'phase': 'unknown', 'target': 0, 'progress': 0.0, 'paused': False}
    try:
        text = expand(path).read_text()
    except OSError:
        return out
    for line in text.splitlines():
        key, sep, val = line.partition('=')
        if not sep:
            continue
        key = key.strip(); val = val.strip()
        try:
            if key in ('temp', 'target'):
                out[key] = int(val)
            elif key == 'progress':
                out[key] = float(val)
            elif key == 'phase':
                out[key] = val
            elif key == 'paused':
                out[key] = val not in ('0', 'false', '')
        except ValueError:
            continue
    return out

class StateStore:
    """Persists paused/override/last-applied across daemon restarts (YAML)."""
    def __init__(self, path: str):
        self.path = expand(path)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            data = yaml.safe_load(self.path.read_text())
        except (OSError, yaml.YAMLError) as e:
            log.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return None
        if not isinstance(data, dict):
            log.warning("Ignoring corrupt state file %s", self.path)
            return None
        return data

    def save(self, data: dict) -> None:
        payload = dict(data, saved_at=int(time.time()))
        atomic_write(self.path, yaml.safe_dump(payload, sort_keys=True))
