"""
Substitution engine.
Runs the fixed sequence of textual transforms over one value.
"""

from typing import List, Optional

from loadenv.exec.runner import CommandRunner
from loadenv.exec.substitution import (
    BracketCommandPass,
    ParenCommandPass,
    SubstitutionContext,
    SubstitutionPass,
)
from loadenv.security.secrets import SecretLookupPass, SecretsRegistry
from loadenv.variables import VariableExpander


class SubstitutionEngine:
    """
    Resolves a single value against its line's scope.

    Order is fixed:
    1. $NAME / ${NAME} expansion
    2. secret lookup $(gopass show PATH)
    3. bracket commands $[...]
    4. paren commands $(...)

    Each pass works on the output of the previous one.
    """

    def __init__(
        self,
        runner: CommandRunner,
        secret_tool: str = "gopass",
        command_shell: str = "sh",
        secrets: Optional[SecretsRegistry] = None,
    ):
        self.expander = VariableExpander()
        self.secrets = secrets if secrets is not None else SecretsRegistry()
        self.passes: List[SubstitutionPass] = [
            SecretLookupPass(runner, self.expander, tool=secret_tool, registry=self.secrets),
            BracketCommandPass(runner, self.expander, shell=command_shell),
            ParenCommandPass(runner, self.expander, shell=command_shell),
        ]

    @classmethod
    def from_config(cls, runner: CommandRunner, config, secrets: Optional[SecretsRegistry] = None) -> 'SubstitutionEngine':
        """Build an engine using the tool names from a LoadEnvConfig."""
        return cls(
            runner,
            secret_tool=config.secret_tool,
            command_shell=config.command_shell,
            secrets=secrets,
        )

    def resolve(self, value: str, context: SubstitutionContext) -> str:
        value = self.expander.expand(value, context.scope)
        for substitution in self.passes:
            value = substitution.apply(value, context)
        return value
