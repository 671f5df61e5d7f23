"""
Variable handling: reference expansion, scope merging and the
literal-dollar placeholder.
"""

from .expansion import (
    LITERAL_DOLLAR_PLACEHOLDER,
    VariableExpander,
    escape_literal_dollars,
    restore_literal_dollars,
)
from .scope import merge_scopes

__all__ = [
    'LITERAL_DOLLAR_PLACEHOLDER',
    'VariableExpander',
    'escape_literal_dollars',
    'restore_literal_dollars',
    'merge_scopes',
]
