"""
Command substitution passes.

Each pass is an independent matcher plus replacer over a value string:
- $[COMMAND]  bracket form, bounded by the first ']'
- $(COMMAND)  paren form, bounded by the first ')'

The secret-lookup form lives in loadenv.security.secrets and shares the
same base class. Matched commands run through an injected CommandRunner;
their output (one trailing newline trimmed) replaces the token and is then
expanded for variable references once more.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .runner import CommandRunner
from ..variables import (
    LITERAL_DOLLAR_PLACEHOLDER,
    VariableExpander,
    restore_literal_dollars,
)


logger = logging.getLogger(__name__)


@dataclass
class SubstitutionContext:
    """
    Everything a pass needs to know about the line being resolved.

    Attributes:
        key: Variable being defined (for diagnostics)
        line_number: Line in the source file
        source: Source file name
        scope: Lookup scope for variable expansion of command output
        command_env: Environment handed to sub-processes
    """
    key: str
    line_number: int
    source: str
    scope: Dict[str, str] = field(default_factory=dict)
    command_env: Dict[str, str] = field(default_factory=dict)

    def location(self) -> str:
        return f"line {self.line_number} in '{self.source}'"


class SubstitutionPass:
    """Base class for a regex-bounded command substitution."""

    pattern: re.Pattern
    label = "command"

    def __init__(self, runner: CommandRunner, expander: VariableExpander):
        self.runner = runner
        self.expander = expander

    def build_command(self, match: re.Match) -> Tuple[str, List[str]]:
        """Return (program, args) for a match."""
        raise NotImplementedError

    def describe(self, match: re.Match) -> str:
        """Text identifying the match in warnings."""
        return match.group(0)

    def on_output(self, match: re.Match, output: str) -> None:
        """Hook called with successful, non-empty output."""

    def apply(self, text: str, context: SubstitutionContext) -> str:
        """
        Replace every match in text with its command output.

        Failures never raise: the token becomes the empty string and a
        warning is logged.
        """
        if not self.pattern.search(text):
            return text

        def replace(match):
            program, args = self.build_command(match)
            result = self.runner.run(program, args, context.command_env)

            if not result.ok:
                logger.warning(
                    f"{self.label} for variable '{context.key}' ({self.describe(match)}) "
                    f"failed on {context.location()}: {result.describe_failure()}. "
                    f"Value set to empty."
                )
                return ''

            output = result.text()
            if output == '':
                logger.warning(
                    f"{self.label} for variable '{context.key}' ({self.describe(match)}) "
                    f"returned an empty value on {context.location()}."
                )
                return ''

            self.on_output(match, output)
            return self.expander.expand(output, context.scope)

        return self.pattern.sub(replace, text)


class ShellCommandPass(SubstitutionPass):
    """Runs the matched text through `<shell> -c`."""

    def __init__(self, runner: CommandRunner, expander: VariableExpander, shell: str = "sh"):
        super().__init__(runner, expander)
        self.shell = shell

    def build_command(self, match: re.Match) -> Tuple[str, List[str]]:
        # The shell gets its own "\$" escape back
        command = match.group(1).replace(LITERAL_DOLLAR_PLACEHOLDER, '\\$')
        return self.shell, ['-c', command]


class BracketCommandPass(ShellCommandPass):
    """$[COMMAND]: safe for commands containing parentheses or backticks."""

    pattern = re.compile(r'\$\[([^\]]*)\]')
    label = "Command substitution $[...]"


class ParenCommandPass(ShellCommandPass):
    """$(COMMAND): stops at the first ')', so COMMAND cannot contain one."""

    pattern = re.compile(r'\$\(([^)]*)\)')
    label = "Command substitution $(...)"


def command_environment(env: Dict[str, str]) -> Dict[str, str]:
    """Copy of env with placeholders turned back into literal dollars."""
    return {k: restore_literal_dollars(v) for k, v in env.items()}
