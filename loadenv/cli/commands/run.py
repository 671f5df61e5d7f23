"""Run command implementation: resolve a chain, then view, export or launch."""

import logging
import os
import shlex
import shutil
import sys
from argparse import Namespace
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from loadenv.config import LoadEnvConfig, find_env_file, split_chain
from loadenv.engine import SubstitutionEngine
from loadenv.exceptions import ConfigValidationError, LoadEnvError
from loadenv.exec.runner import CommandRunner, SubprocessRunner
from loadenv.resolver import ChainResult, EnvFileResolver
from loadenv.security.secrets import SecretsMaskingFilter, SecretsRegistry


logger = logging.getLogger(__name__)

LOG_FORMAT = 'load-env: %(levelname)s: %(message)s'

_QUOTE_ESCAPES = {
    '\a': '\\a',
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\v': '\\v',
    '\\': '\\\\',
    '"': '\\"',
}


def setup_logging(args: Namespace, secrets: SecretsRegistry) -> None:
    """Configure stderr logging and mask fetched secrets in every record."""
    log_level = logging.INFO
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger('loadenv').setLevel(log_level)

    for handler in logging.getLogger().handlers:
        attached = [f for f in handler.filters if isinstance(f, SecretsMaskingFilter)]
        if attached:
            for masking in attached:
                masking.registry = secrets
        else:
            handler.addFilter(SecretsMaskingFilter(secrets))


def quote_value(value: str) -> str:
    """Double-quote a value for display, escaping control characters."""
    out = ['"']
    for ch in value:
        if ch in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x100:
            out.append(f'\\x{ord(ch):02x}')
        elif ord(ch) < 0x10000:
            out.append(f'\\u{ord(ch):04x}')
        else:
            out.append(f'\\U{ord(ch):08x}')
    out.append('"')
    return ''.join(out)


def format_view(resolved: Mapping[str, str]) -> List[str]:
    """KEY="value" lines, sorted by key."""
    return [f"{key}={quote_value(resolved[key])}" for key in sorted(resolved)]


def format_export(resolved: Mapping[str, str]) -> List[str]:
    """export statements safe to eval in a POSIX shell, sorted by key."""
    return [f"export {key}={shlex.quote(resolved[key])}" for key in sorted(resolved)]


def resolve_identifiers(
    chain: str,
    config: LoadEnvConfig,
    runner: CommandRunner,
    process_env: Mapping[str, str],
    secrets: Optional[SecretsRegistry] = None,
    cwd: Optional[Path] = None,
) -> ChainResult:
    """
    Find and resolve every env file in a comma-separated chain.

    Raises:
        LoadEnvError: Missing identifier, missing file or unreadable file
    """
    identifiers = split_chain(chain)
    if not identifiers:
        raise LoadEnvError(f"No env file identifier given in '{chain}'")

    paths = [find_env_file(identifier, config, cwd) for identifier in identifiers]

    engine = SubstitutionEngine.from_config(runner, config, secrets=secrets)
    resolver = EnvFileResolver(runner, engine=engine)
    return resolver.resolve_chain(paths, process_env)


def launch(command: List[str], env: Dict[str, str], config: LoadEnvConfig, chain: str) -> int:
    """
    Replace the current process with command, or with an interactive shell.

    Only returns when the exec fails.
    """
    if command:
        target = command[0]
        argv = list(command)
    else:
        target = os.environ.get('SHELL') or config.default_shell
        logger.info(f"Launching new '{target}' subshell with environment for '{chain}'...")
        argv = [target, '-i']

    executable = shutil.which(target, path=env.get('PATH', os.environ.get('PATH')))
    if executable is None:
        logger.error(f"Executable '{target}' not found in PATH")
        return 1

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execve(executable, argv, env)
    except (OSError, ValueError) as e:
        logger.error(f"Error executing '{executable}': {e}")
    return 1


def run_load_env(args: Namespace) -> int:
    """
    Resolve the requested chain and act on it.

    Exit codes: 0 success, 1 file or launch error, 2 config error.
    """
    secrets = SecretsRegistry()
    setup_logging(args, secrets)

    if args.export and args.command:
        logger.error(
            f"When using --export, no executable or arguments should be provided "
            f"(found: '{' '.join(args.command)}'). Did you mean "
            f"'load-env {args.chain} {' '.join(args.command)}'?"
        )
        return 1

    process_env = dict(os.environ)

    try:
        config = LoadEnvConfig.load(process_env)
        result = resolve_identifiers(
            args.chain,
            config,
            SubprocessRunner(),
            process_env,
            secrets=secrets,
        )
    except ConfigValidationError as e:
        for error in e.errors:
            logger.error(f"Config error: {error.message}")
        return e.exit_code
    except LoadEnvError as e:
        logger.error(str(e))
        return e.exit_code

    if args.view:
        for line in format_view(result.resolved):
            print(line)
        return 0

    if args.export:
        for line in format_export(result.resolved):
            print(line)
        return 0

    sandboxed = args.sandbox or config.sandbox
    return launch(args.command, result.environment(sandboxed=sandboxed), config, args.chain)
