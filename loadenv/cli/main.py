"""Main CLI entry point for load-env."""

import argparse
import sys
from typing import Optional

from loadenv import __version__
from .commands import run_load_env


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the load-env CLI."""
    parser = argparse.ArgumentParser(
        prog='load-env',
        description=(
            'Load variables from <id>.env (current directory first, then '
            '~/.config/load-env or $LOAD_ENV_CONFIG_DIR) and run a command, '
            'a subshell, or print them.'
        ),
        epilog=(
            'Chains: pass several identifiers separated by commas '
            '(e.g. base,dev). Later files override earlier ones and can '
            'reference their variables.'
        ),
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        '--view',
        action='store_true',
        help='Display the resolved variables and exit (prints secrets in plaintext)'
    )
    mode.add_argument(
        '--export',
        action='store_true',
        help='Print export statements for eval "$(load-env --export <id>)"'
    )
    parser.add_argument(
        '--sandbox',
        action='store_true',
        help='Pass only variables defined in the env files to the launched process'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress warnings'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'load-env version {__version__}'
    )
    parser.add_argument(
        'chain',
        metavar='id[,id...]',
        help='Env file identifier(s), comma-separated'
    )
    parser.add_argument(
        'command',
        nargs=argparse.REMAINDER,
        help='Executable and arguments (default: interactive subshell)'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    return run_load_env(parsed_args)


if __name__ == '__main__':
    sys.exit(main())
