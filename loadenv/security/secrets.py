"""
Secret-store lookups and masking.

A value of the form $(gopass [show] PATH [flags]) is recognized before the
generic $(...) form and always runs as `gopass show --password PATH`, so
only the password line is fetched whatever flags were written. Fetched
values are remembered and masked out of log records.
"""

import logging
import re
from typing import Dict, List, Optional, Set, Any, Tuple

from ..exec.runner import CommandRunner
from ..exec.substitution import SubstitutionPass
from ..variables import VariableExpander, restore_literal_dollars


class SecretsRegistry:
    """
    Remembers secret values fetched during resolution.

    Values are used only for masking; the registry never hands them out.
    """

    def __init__(self):
        self._masked_values: Set[str] = set()

    def add(self, value: str):
        # empty values are never masked
        if value:
            self._masked_values.add(value)

    def __len__(self) -> int:
        return len(self._masked_values)

    def mask_text(self, text: str) -> str:
        """Replace every fetched secret in `text` by '***', longest secret first."""
        if not text or not self._masked_values:
            return text

        for fetched in sorted(self._masked_values, key=len, reverse=True):
            text = text.replace(fetched, '***')
        return text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask secrets in the string values of a dict."""
        if not data or not self._masked_values:
            return data

        return {
            key: self.mask_text(value) if isinstance(value, str) else value
            for key, value in data.items()
        }

    def clear(self):
        """Forget all recorded values."""
        self._masked_values.clear()


class SecretsMaskingFilter(logging.Filter):
    """
    Handler filter that rewrites records before they reach stderr.

    A secret can end up inside a later command line, and the warning for
    that command quotes it.
    """

    def __init__(self, registry: SecretsRegistry):
        super().__init__()
        self.registry = registry

    def filter(self, record):
        record.msg = self.registry.mask_text(str(record.msg))

        args = record.args
        if isinstance(args, dict):
            record.args = self.registry.mask_dict(args)
        elif isinstance(args, tuple) and args:
            record.args = tuple(
                self.registry.mask_text(arg) if isinstance(arg, str) else arg
                for arg in args
            )
        return True


class SecretLookupPass(SubstitutionPass):
    """
    $(<tool> [show] PATH [flags]) substitution.

    The command is canonicalized to `<tool> show --password PATH` and run
    directly, without a shell.
    """

    label = "Secret lookup"

    def __init__(
        self,
        runner: CommandRunner,
        expander: VariableExpander,
        tool: str = "gopass",
        registry: Optional[SecretsRegistry] = None,
    ):
        super().__init__(runner, expander)
        self.tool = tool
        self.registry = registry
        self.pattern = re.compile(
            r'\$\(\s*' + re.escape(tool) +
            r'(?:\s+show)?\s+([^\s)]+)(?:\s+-[^\s)]*)*\s*\)'
        )

    def build_command(self, match: re.Match) -> Tuple[str, List[str]]:
        return self.tool, ['show', '--password', self.secret_path(match)]

    def secret_path(self, match: re.Match) -> str:
        return restore_literal_dollars(match.group(1))

    def describe(self, match: re.Match) -> str:
        return f"path: '{self.secret_path(match)}'"

    def on_output(self, match: re.Match, output: str) -> None:
        if self.registry is not None:
            self.registry.add(output)
