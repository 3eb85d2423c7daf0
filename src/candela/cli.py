import argparse
import json
import logging
import signal
import sys

import yaml

from candela.config import Configuration
from candela.control import ControlChannel, parse_kelvin
from candela.exceptions import CommandError, ConfigurationError, SetterError
from candela.logging_config import resolve_logging_from_env_and_cfg, setup_logging
from candela.runtime import build_daemon, load_config
from candela.setter import ensure_backend
from candela.status import read_status

log = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='candela', description='Smooth colour temperature transitions for the display')
    parser.add_argument('-c', '--config', help='path to config.yaml')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='only warnings and errors')
    parser.add_argument('--json', action='store_true', help='machine-readable output')
    parser.add_argument('--dry-run', action='store_true', help='log instead of calling the setter')
    sub = parser.add_subparsers(dest='command')
    sub.add_parser('daemon', help='run the transition loop (default)')
    sub.add_parser('now', help='print the current temperature')
    sub.add_parser('status', help='print temp/phase/target/progress')
    p_set = sub.add_parser('set', help='force a temperature until resume')
    p_set.add_argument('temperature')
    sub.add_parser('pause', help='freeze the current temperature')
    sub.add_parser('resume', help='return to the schedule')
    sub.add_parser('config', help='print the resolved configuration')
    return parser

def _setup_logging(cfg: Configuration, args) -> None:
    enabled, level, log_file = resolve_logging_from_env_and_cfg(cfg)
    if args.verbose:
        level = 'DEBUG'
    elif args.quiet:
        level = 'WARNING'
    setup_logging(enabled, level, log_file)

def run_daemon(cfg: Configuration, args) -> int:
    loop = build_daemon(cfg, dry_run=args.dry_run)
    if not args.dry_run:
        ensure_backend(cfg.setter.backend)
    signal.signal(signal.SIGINT, loop.stop); signal.signal(signal.SIGTERM, loop.stop)
    loop.run()
    return 0

def cmd_now(cfg: Configuration, args) -> int:
    st = read_status(cfg.daemon.status_file)
    print(json.dumps({'temp': st['temp']}) if args.json else f"{st['temp']}K")
    return 0

def cmd_status(cfg: Configuration, args) -> int:
    st = read_status(cfg.daemon.status_file)
    if args.json:
        print(json.dumps({'temp': st['temp'], 'phase': st['phase'], 'target': st['target'],
                          'progress': round(st['progress'], 2), 'paused': st['paused']}))
    else:
        print(f"temp={st['temp']}")
        print(f"phase={st['phase']}")
        print(f"target={st['target']}")
        print(f"progress={st['progress']:.2f}")
        if st['paused']:
            print("paused=1")
    return 0

def cmd_set(cfg: Configuration, args) -> int:
    value = parse_kelvin(args.temperature)
    lo, hi = cfg.temperature.bounds
    if not lo <= value <= hi:
        raise CommandError(f"temperature {value}K outside configured range {lo}-{hi}K")
    if not args.quiet:
        print(f"Setting temperature to {value}K")
    if not args.dry_run:
        ControlChannel(cfg.daemon.control_file).send(f"set {value}")
    return 0

def cmd_simple(cfg: Configuration, args) -> int:
    if not args.dry_run:
        ControlChannel(cfg.daemon.control_file).send(args.command)
    if not args.quiet:
        print('Paused' if args.command == 'pause' else 'Resumed')
    return 0

def cmd_config(cfg: Configuration, args) -> int:
    if args.json:
        print(cfg.model_dump_json(indent=2))
    else:
        print(yaml.safe_dump(cfg.model_dump(mode='json'), sort_keys=False), end='')
    return 0

HANDLERS = {
    'daemon': run_daemon,
    'now': cmd_now,
    'status': cmd_status,
    'set': cmd_set,
    'pause': cmd_simple,
    'resume': cmd_simple,
    'config': cmd_config,
}

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or 'daemon'
    try:
        cfg = load_config(args.config)
    except ConfigurationError as e:
        print(f"candela: {e}", file=sys.stderr)
        return 2
    if command == 'daemon':
        _setup_logging(cfg, args)
    try:
        return HANDLERS[command](cfg, args)
    except (CommandError, SetterError) as e:
        print(f"candela: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"candela: {e}", file=sys.stderr)
        return 1
