"""load-env exceptions."""

from typing import List, Optional
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ValidationError:
    """Single configuration validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class LoadEnvError(Exception):
    """Base class for errors that abort a whole run."""

    exit_code = 1


class EnvFileError(LoadEnvError):
    """Raised when an env file cannot be opened or read.

    Substitution problems never raise this; they degrade to empty values
    with a warning instead.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class EnvFileNotFoundError(EnvFileError):
    """Raised when an identifier has no env file in any search location."""

    def __init__(self, identifier: str, searched: List[Path]):
        self.identifier = identifier
        self.searched = searched
        locations = ", ".join(str(p.parent) for p in searched)
        super().__init__(
            f"Environment file '{identifier}.env' not found in: {locations}",
            path=searched[-1] if searched else None,
        )


class ConfigValidationError(LoadEnvError):
    """Raised when config.yaml fails validation.

    Carries every collected error so the CLI can report them all at once.
    """

    def __init__(self, errors: List[ValidationError], source: Optional[Path] = None):
        self.errors = errors
        self.source = source
        self.exit_code = 2

        messages = []
        for error in errors:
            messages.append(f"Config error: {error.message}")

        super().__init__("\n".join(messages))
