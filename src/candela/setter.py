import logging
import shutil
import subprocess
from typing import Sequence

from candela.exceptions import SetterError

log = logging.getLogger(__name__)

class TemperatureSetter:
    def apply(self, kelvin: int) -> None: raise NotImplementedError

class CommandSetter(TemperatureSetter):
    """Runs ``<command...> <kelvin>`` with a hard timeout."""
    def __init__(self, command: Sequence[str], timeout_s: float = 5.0):
        self.command = list(command); self.timeout_s = timeout_s
    def apply(self, kelvin: int) -> None:
        args = self.command + [str(int(kelvin))]
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout_s)
        except subprocess.TimeoutExpired:
            raise SetterError(f"{' '.join(args)} timed out after {self.timeout_s}s") from None
        except OSError as e:
            raise SetterError(f"{' '.join(args)} could not be started: {e}") from e
        if result.returncode != 0:
            raise SetterError(f"{' '.join(args)} failed (exit code {result.returncode}): {result.stderr.strip()}")

class DryRunSetter(TemperatureSetter):
    def __init__(self): self.sent: list[int] = []
    def apply(self, kelvin: int) -> None:
        log.info("[dry-run] would set %dK", kelvin); self.sent.append(kelvin)

def backend_running(name: str) -> bool:
    try:
        return subprocess.run(['pidof', name], capture_output=True, timeout=2).returncode == 0
    except (OSError, subprocess.TimeoutExpired):
        return False

def ensure_backend(name: str) -> bool:
    """Start ``name`` in the background unless it is already running."""
    if not name or backend_running(name):
        return True
    if shutil.which(name) is None:
        log.warning("Backend %s not found on PATH", name)
        return False
    try:
        log.info("Starting %s…", name)
        subprocess.Popen([name], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, start_new_session=True)
        return True
    except OSError as e:
        log.warning("Could not start %s: %s", name, e)
        return False
