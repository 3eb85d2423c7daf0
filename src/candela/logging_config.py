from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler

class ShortFormatter(logging.Formatter):
    """
    Formatter that exposes %(shortname)s = last component of logger name (e.g., daemon)
    """
    def format(self, record: logging.LogRecord) -> str:
        record.shortname = record.name.rsplit('.', 1)[-1]
        return super().format(record)

def setup_logging(enabled: bool = True, level: str | int = "INFO", log_file: str | None = None) -> None:
    """
    Configure root logging once. Format: timestamp level [logger.func] message
    Enable/disable with env CANDELA_LOGGING=1/0; level with CANDELA_LOG_LEVEL=INFO/DEBUG/etc.
    """
    if getattr(setup_logging, "_configured", False):
        return

    if not enabled:
        logging.disable(logging.CRITICAL)
        setup_logging._configured = True
        return

    logging.disable(logging.NOTSET)
    lvl = level.upper() if isinstance(level, str) else level
    if isinstance(lvl, str) and not isinstance(logging.getLevelName(lvl), int):
        lvl = "INFO"
    fmt = "%(asctime)s %(levelname)s [%(shortname)s.%(funcName)s] %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = ShortFormatter(fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []
    sh = logging.StreamHandler(stream=sys.stdout)
    sh.setFormatter(formatter)
    handlers.append(sh)

    if log_file:
        log_file = os.path.expanduser(log_file)
        try:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            fh = RotatingFileHandler(log_file, maxBytes=512_000, backupCount=3)
            fh.setFormatter(formatter)
            handlers.append(fh)
        except OSError as e:
            # keep console logging
            print(f"candela: cannot open log file {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(level=lvl, handlers=handlers, force=True)
    setup_logging._configured = True

def resolve_logging_from_env_and_cfg(cfg, environ=os.environ) -> tuple[bool, str, str | None]:
    """
    Determine enabled/level/file using env first, then cfg.logging.
    Env:
      CANDELA_LOGGING=1|0, CANDELA_LOG_LEVEL=DEBUG|INFO|..., CANDELA_LOG_FILE=/path/to/log
    """
    lcfg = getattr(cfg, "logging", None)
    env_enabled = environ.get("CANDELA_LOGGING")
    if env_enabled is not None:
        enabled = env_enabled.lower() not in ("0", "false", "no")
    else:
        enabled = bool(getattr(lcfg, "enabled", True))
    level = environ.get("CANDELA_LOG_LEVEL") or str(getattr(lcfg, "level", "INFO"))
    log_file = environ.get("CANDELA_LOG_FILE") or getattr(lcfg, "file", None)
    return enabled, level, log_file
