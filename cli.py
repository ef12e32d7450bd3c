#!/usr/bin/env python3
"""Command-line interface for transactional file writes."""

import argparse
import logging
import sys
from pathlib import Path

from transactional_io import (
    FileMode,
    TransactionalFile,
    TransactionalIOError,
    find_artifacts,
    recover,
)
from transactional_io.config import DEFAULT_CONFIG, create_default_config, load_config
from transactional_io.naming import resolve_token_factory
from transactional_io.utils import setup_logger


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='transactional-io',
        description='All-or-nothing file writes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a default config file
  transactional-io init

  # Replace settings.json with stdin, only if the whole input arrives
  generate-settings | transactional-io write settings.json -m truncate

  # Append a file's content to a log in one step
  transactional-io write app.log -m append -i new-entries.log

  # Show leftovers of interrupted transactions
  transactional-io status settings.json

  # Restore settings.json from a leftover backup and remove temp files
  transactional-io recover settings.json --clean
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # init
    init_parser = subparsers.add_parser(
        'init', help='Write a default config file'
    )
    init_parser.add_argument(
        '-o', '--output',
        type=Path,
        default=Path('config.yaml'),
        help='Config file output path (default: config.yaml)'
    )
    init_parser.add_argument(
        '-f', '--force',
        action='store_true',
        help='Overwrite an existing config file'
    )

    # write
    write_parser = subparsers.add_parser(
        'write', help='Transactionally write input to a target file'
    )
    write_parser.add_argument('target', type=Path, help='Target file')
    write_parser.add_argument(
        '-m', '--mode',
        type=str,
        default=None,
        help='Open mode: ' + ', '.join(m.value for m in FileMode)
             + ' (default from config: create)'
    )
    write_parser.add_argument(
        '-i', '--input',
        type=Path,
        default=None,
        help='Read from this file instead of stdin'
    )
    write_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Go through the transaction without committing it'
    )
    write_parser.add_argument(
        '-c', '--config',
        type=Path,
        default=Path('config.yaml'),
        help='Config file path (used if present)'
    )
    write_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    # status
    status_parser = subparsers.add_parser(
        'status', help='List leftover temp and backup files of a target'
    )
    status_parser.add_argument('target', type=Path, help='Target file')

    # recover
    recover_parser = subparsers.add_parser(
        'recover', help='Restore a missing target from its newest backup'
    )
    recover_parser.add_argument('target', type=Path, help='Target file')
    recover_parser.add_argument(
        '--clean',
        action='store_true',
        help='Also remove leftover temp files and remaining backups'
    )
    recover_parser.add_argument(
        '-c', '--config',
        type=Path,
        default=Path('config.yaml'),
        help='Config file path (used if present)'
    )
    recover_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        'init': cmd_init,
        'write': cmd_write,
        'status': cmd_status,
        'recover': cmd_recover,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


def _load_settings(args) -> dict:
    """Load the config if it exists and set up logging from it."""
    if args.config.exists():
        config = load_config(args.config)
    else:
        config = DEFAULT_CONFIG

    log_config = config.get('logging') or {}
    level = logging.DEBUG if args.verbose else log_config.get('level', 'INFO')
    log_file = log_config.get('file')
    setup_logger(
        'transactional_io',
        log_file=Path(log_file) if log_file else None,
        level=level
    )
    return config


def cmd_init(args):
    """Write the default config file."""
    output_path = args.output

    if output_path.exists() and not args.force:
        print(f'error: {output_path} already exists (use --force to overwrite)', file=sys.stderr)
        return 1

    create_default_config(output_path)
    print(f'Default config written: {output_path}')
    return 0


def cmd_write(args):
    """Copy stdin or an input file into the target, all or nothing."""
    try:
        config = _load_settings(args)
        defaults = config['defaults']
        mode = FileMode.parse(args.mode or defaults['mode'])
        token_factory = resolve_token_factory(config['naming']['token'])
        chunk_size = int(defaults['chunk_size'])
    except (OSError, ValueError) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    try:
        source = open(args.input, 'rb') if args.input else sys.stdin.buffer
    except OSError as e:
        print(f'error: cannot read input: {e}', file=sys.stderr)
        return 1

    try:
        with TransactionalFile(args.target, mode, token_factory=token_factory) as f:
            while True:
                chunk = source.read(chunk_size)
                if not chunk:
                    break
                f.write(chunk)
            if not args.dry_run:
                f.commit()
    except KeyboardInterrupt:
        print(f'\ninterrupted: {args.target} left unchanged', file=sys.stderr)
        return 130
    except (TransactionalIOError, OSError) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1
    finally:
        if args.input:
            source.close()

    if args.dry_run:
        print(f'dry run: {args.target} left unchanged')
    return 0


def cmd_status(args):
    """List leftover transaction artifacts."""
    artifacts = find_artifacts(args.target)

    if artifacts.empty:
        print(f'{args.target}: clean')
        return 0

    print(f'{args.target}:')
    for path in artifacts.temp_files:
        print(f'  temp    {path.name}')
    for path in artifacts.backup_files:
        print(f'  backup  {path.name}')
    if not args.target.exists() and artifacts.backup_files:
        print(f'target is missing; run "transactional-io recover {args.target}"')
    return 0


def cmd_recover(args):
    """Restore a missing target from a leftover backup."""
    try:
        _load_settings(args)
        report = recover(args.target, clean=args.clean)
    except (TransactionalIOError, OSError, ValueError) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    if report.restored:
        print(f'restored {args.target} from {report.restored_from.name}')
    for path in report.removed:
        print(f'removed {path.name}')
    for path in report.remaining:
        print(f'left in place: {path.name} (use --clean to remove)')
    if not report.restored and not report.removed and not report.remaining:
        print(f'{args.target}: nothing to recover')
    return 0


if __name__ == '__main__':
    sys.exit(main())
