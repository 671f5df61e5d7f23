"""
Execution module.
Handles the command runner capability and command substitution passes.
"""

from .runner import CommandResult, CommandRunner, SubprocessRunner
from .substitution import (
    BracketCommandPass,
    ParenCommandPass,
    ShellCommandPass,
    SubstitutionContext,
    SubstitutionPass,
    command_environment,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "BracketCommandPass",
    "ParenCommandPass",
    "ShellCommandPass",
    "SubstitutionContext",
    "SubstitutionPass",
    "command_environment",
]
