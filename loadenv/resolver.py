"""
Env file resolution: single files and chains of files.

Within a file, lines resolve strictly in order and each line sees only the
inherited environment plus the lines above it. Across a chain, each file
inherits the process environment plus everything earlier files defined.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from loadenv.engine import SubstitutionEngine
from loadenv.exec.runner import CommandRunner
from loadenv.exec.substitution import SubstitutionContext, command_environment
from loadenv.parser import read_lines
from loadenv.variables import merge_scopes, restore_literal_dollars


logger = logging.getLogger(__name__)


@dataclass
class ChainResult:
    """
    Outcome of resolving a chain of env files.

    Attributes:
        resolved: Variables defined across the chain, later files winning
        process_env: The process environment the chain started from
    """
    resolved: Dict[str, str]
    process_env: Dict[str, str] = field(default_factory=dict)

    def environment(self, sandboxed: bool = False) -> Dict[str, str]:
        """
        Environment for the launched process.

        Args:
            sandboxed: Only chain-defined variables when True; otherwise the
                process environment with chain values layered on top
        """
        if sandboxed:
            return dict(self.resolved)
        return merge_scopes(self.process_env, self.resolved)


class EnvFileResolver:
    """Resolves env files using a substitution engine."""

    def __init__(self, runner: CommandRunner, engine: Optional[SubstitutionEngine] = None):
        """
        Initialize resolver.

        Args:
            runner: Command runner for all command substitutions
            engine: Pre-configured engine (default: built around runner)
        """
        self.runner = runner
        self.engine = engine or SubstitutionEngine(runner)

    def resolve_file(self, path: Union[str, Path], inherited: Mapping[str, str]) -> Dict[str, str]:
        """
        Resolve every line of one env file.

        Args:
            path: Env file to read
            inherited: Variables known before this file

        Returns:
            Variables defined by the file, fully resolved. Escaped dollars are
            still placeholders at this point.

        Raises:
            EnvFileError: File cannot be opened or read
        """
        path = Path(path)
        resolved: Dict[str, str] = {}

        for raw in read_lines(path):
            scope = merge_scopes(inherited, resolved)
            context = SubstitutionContext(
                key=raw.key,
                line_number=raw.line_number,
                source=str(path),
                scope=scope,
                command_env=command_environment(scope),
            )
            resolved[raw.key] = self.engine.resolve(raw.value, context)

        logger.debug(f"Resolved {len(resolved)} variable(s) from {path}")
        return resolved

    def resolve_chain(self, paths: Iterable[Union[str, Path]], process_env: Mapping[str, str]) -> ChainResult:
        """
        Resolve an ordered chain of env files.

        Args:
            paths: Env files, earliest first
            process_env: Base environment, passed explicitly

        Returns:
            ChainResult with placeholders restored to literal dollars
        """
        base = dict(process_env)
        inherited = dict(base)
        joint: Dict[str, str] = {}

        for path in paths:
            joint.update(self.resolve_file(path, inherited))
            inherited = merge_scopes(base, joint)

        resolved = {k: restore_literal_dollars(v) for k, v in joint.items()}
        return ChainResult(resolved=resolved, process_env=base)
