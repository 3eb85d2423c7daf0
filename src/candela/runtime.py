import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from candela.config import Configuration, apply_env
from candela.control import ControlChannel
from candela.controller import Controller
from candela.daemon import DaemonLoop
from candela.exceptions import ConfigurationError
from candela.setter import CommandSetter, DryRunSetter
from candela.status import StateStore, StatusWriter

def config_candidates(environ: Mapping[str, str] = os.environ) -> list[Path]:
    base = Path(environ.get('XDG_CONFIG_HOME') or Path.home() / '.config')
    return [Path('candela.yaml'), base / 'candela' / 'config.yaml', base / 'candela.yaml']

def find_config(environ: Mapping[str, str] = os.environ) -> Optional[Path]:
    for p in config_candidates(environ):
        if p.exists():
            return p
    return None

def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        where = '.'.join(str(x) for x in err.get('loc', ())) or 'config'
        parts.append(f"{where}: {err.get('msg')}")
    return '; '.join(parts)

def load_config(path: str | None = None, environ: Mapping[str, str] = os.environ) -> Configuration:
    """File (explicit path or first found) + environment overlay, validated."""
    p = Path(path) if path else find_config(environ)
    data: dict = {}
    if p is not None:
        try:
            with open(p, 'r') as f:
                loaded = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"cannot read config {p}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in {p}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"{p}: top level must be a mapping")
        data = loaded or {}
    try:
        return Configuration.model_validate(apply_env(data, environ))
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {_describe(e)}") from None

def build_daemon(cfg: Configuration, dry_run: bool = False) -> DaemonLoop:
    setter = DryRunSetter() if dry_run else CommandSetter(cfg.setter.command, cfg.daemon.setter_timeout_seconds)
    loop = DaemonLoop(
        cfg,
        Controller(cfg.temperature),
        setter,
        StatusWriter(cfg.daemon.status_file),
        state_store=None if dry_run else StateStore(cfg.daemon.state_file),
        channel=ControlChannel(cfg.daemon.control_file),
    )
    loop.restore()
    return loop
