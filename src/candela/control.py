"""
Command channel between the CLI and a running daemon.

Clients append one command per line (``pause``, ``resume``, ``set 3000``).
Both sides take an exclusive flock on the file. The daemon reads and unlinks
it while holding the lock; a client that opened the file before that finds
its descriptor no longer matches the path once it gets the lock, and reopens
instead of writing into the unlinked file.
"""
from __future__ import annotations
import fcntl
import logging
import os
from typing import List, Tuple

from candela.exceptions import CommandError
from candela.status import expand

log = logging.getLogger(__name__)

COMMANDS = ('pause', 'resume', 'set')

def parse_kelvin(text) -> int:
    try:
        value = int(str(text).strip())
    except ValueError:
        raise CommandError(f"temperature must be an integer, got {text!r}") from None
    if value <= 0:
        raise CommandError(f"temperature must be positive, got {value}")
    return value

def parse_command(line: str) -> Tuple[str, int | None]:
    parts = line.split()
    if not parts or parts[0] not in COMMANDS:
        raise CommandError(f"unknown command {line!r}")
    name = parts[0]
    if name == 'set':
        if len(parts) != 2:
            raise CommandError("usage: set <kelvin>")
        return name, parse_kelvin(parts[1])
    if len(parts) != 1:
        raise CommandError(f"{name} takes no argument")
    return name, None

class ControlChannel:
    def __init__(self, path: str):
        self.path = expand(path)

    def send(self, line: str) -> None:
        parse_command(line)
        data = (line.strip() + "\n").encode()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        while True:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
            try:
                if self._append(fd, data):
                    return
            finally:
                os.close(fd)

    def _append(self, fd: int, data: bytes) -> bool:
        """Write under the lock; False if the daemon claimed this file after ``fd`` was opened."""
        fcntl.flock(fd, fcntl.LOCK_EX)
        try:
            current = os.stat(self.path)
        except FileNotFoundError:
            return False
        if not os.path.samestat(os.fstat(fd), current):
            return False
        os.write(fd, data)
        return True

    def drain(self) -> List[str]:
        try:
            fd = os.open(self.path, os.O_RDONLY)
        except FileNotFoundError:
            return []
        chunks = []
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            while True:
                chunk = os.read(fd, 65536)
                if not chunk:
                    break
                chunks.append(chunk)
            try:
                os.unlink(self.path)
            except FileNotFoundError:
                pass
        finally:
            os.close(fd)
        text = b"".join(chunks).decode(errors="replace")
        return [ln.strip() for ln in text.splitlines() if ln.strip()]
