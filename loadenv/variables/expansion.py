"""
Variable reference expansion.
Handles $NAME and ${NAME} lookups against a single flat scope.
"""

import re
from typing import Dict


# Stands in for an escaped "\$" until the whole chain is resolved.
# Contains no "$" so no pattern below can ever match it.
LITERAL_DOLLAR_PLACEHOLDER = "__LOAD_ENV_LITERAL_DOLLAR__"


def escape_literal_dollars(text: str) -> str:
    """Replace every backslash-escaped dollar with the placeholder."""
    return text.replace('\\$', LITERAL_DOLLAR_PLACEHOLDER)


def restore_literal_dollars(text: str) -> str:
    """Turn placeholders back into literal dollar signs."""
    return text.replace(LITERAL_DOLLAR_PLACEHOLDER, '$')


class VariableExpander:
    """
    Expands $NAME and ${NAME} references in a string.

    Expansion is a single pass: replacement text is never scanned again, so
    a value that itself contains "$OTHER" is inserted verbatim. Names that
    are missing from the scope expand to the empty string.
    """

    # Group 1 captures bare $NAME, group 2 captures ${NAME}
    VAR_PATTERN = re.compile(
        r'\$(?:([A-Za-z_][A-Za-z0-9_]*)|\{([A-Za-z_][A-Za-z0-9_]*)\})'
    )

    def expand(self, text: str, scope: Dict[str, str]) -> str:
        """
        Expand variable references in text.

        Args:
            text: String possibly containing $NAME / ${NAME} references
            scope: Variables visible to this string

        Returns:
            String with every reference replaced
        """
        if '$' not in text:
            return text

        def replace_var(match):
            name = match.group(1) or match.group(2)
            return scope.get(name, '')

        return self.VAR_PATTERN.sub(replace_var, text)

