"""Lookup scope construction for per-line resolution."""

from typing import Dict, Mapping


def merge_scopes(inherited: Mapping[str, str], in_file: Mapping[str, str]) -> Dict[str, str]:
    """
    Build the lookup scope for one line.

    Args:
        inherited: Everything known before the current file started
        in_file: Values resolved so far in the current file

    Returns:
        New dict where in-file values win on key collisions
    """
    scope = dict(inherited)
    scope.update(in_file)
    return scope
