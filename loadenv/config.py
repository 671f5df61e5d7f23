"""Configuration: config directory, config.yaml settings and env file discovery."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from loadenv.exceptions import ConfigValidationError, EnvFileNotFoundError, ValidationError


logger = logging.getLogger(__name__)

# Relative to the user's home directory
DEFAULT_CONFIG_DIR = Path(".config") / "load-env"
CONFIG_DIR_ENV_VAR = "LOAD_ENV_CONFIG_DIR"
CONFIG_FILE_NAME = "config.yaml"
ENV_FILE_SUFFIX = ".env"


@dataclass
class LoadEnvConfig:
    """
    Settings for one load-env invocation.

    Attributes:
        config_dir: Central directory searched after the current directory
        secret_tool: Secret-store CLI recognized by the secret-lookup form
        command_shell: Shell used for $[...] and $(...) commands
        default_shell: Interactive shell launched when $SHELL is unset
        sandbox: Hand only chain-defined variables to the launched process
    """
    config_dir: Path
    secret_tool: str = "gopass"
    command_shell: str = "sh"
    default_shell: str = "bash"
    sandbox: bool = False

    STRING_KEYS = ("secret_tool", "command_shell", "default_shell")
    BOOL_KEYS = ("sandbox",)

    @classmethod
    def load(cls, environ: Mapping[str, str], home: Optional[Path] = None) -> 'LoadEnvConfig':
        """
        Build the configuration for a run.

        Args:
            environ: Process environment (read for LOAD_ENV_CONFIG_DIR)
            home: Home directory override (default: Path.home())

        Returns:
            LoadEnvConfig with config.yaml values applied when present

        Raises:
            ConfigValidationError: config.yaml is unreadable or invalid
        """
        config_dir_value = environ.get(CONFIG_DIR_ENV_VAR, "")
        if config_dir_value:
            config_dir = Path(config_dir_value).expanduser()
        else:
            config_dir = (home or Path.home()) / DEFAULT_CONFIG_DIR

        config = cls(config_dir=config_dir)

        config_file = config_dir / CONFIG_FILE_NAME
        if config_file.is_file():
            config.apply(cls._read_yaml(config_file), source=config_file)

        return config

    @staticmethod
    def _read_yaml(config_file: Path) -> Dict[str, Any]:
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigValidationError(
                [ValidationError(f"Failed to load {config_file}: {e}", path=str(config_file))],
                source=config_file,
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigValidationError(
                [ValidationError("config.yaml must be a YAML mapping", path=str(config_file))],
                source=config_file,
            )
        return data

    def apply(self, data: Dict[str, Any], source: Optional[Path] = None):
        """
        Validate and apply settings from a parsed config mapping.

        All problems are collected before raising.
        """
        errors: List[ValidationError] = []

        for key, value in data.items():
            if key in self.STRING_KEYS:
                if not isinstance(value, str) or not value.strip():
                    errors.append(ValidationError(
                        f"'{key}' must be a non-empty string, got {type(value).__name__}",
                        path=key,
                    ))
            elif key in self.BOOL_KEYS:
                if not isinstance(value, bool):
                    errors.append(ValidationError(
                        f"'{key}' must be a boolean, got {type(value).__name__}",
                        path=key,
                    ))
            else:
                errors.append(ValidationError(f"Unknown config key '{key}'", path=str(key)))

        if errors:
            raise ConfigValidationError(errors, source=source)

        for key, value in data.items():
            setattr(self, key, value.strip() if isinstance(value, str) else value)

        logger.debug(f"Applied config from {source}: {sorted(data)}")


def split_chain(chain: str) -> List[str]:
    """Split a comma-separated chain of identifiers, dropping empty entries."""
    return [part.strip() for part in chain.split(',') if part.strip()]


def find_env_file(identifier: str, config: LoadEnvConfig, cwd: Optional[Path] = None) -> Path:
    """
    Locate <identifier>.env.

    The current directory wins over the config directory.

    Raises:
        EnvFileNotFoundError: Not present in either location
    """
    file_name = identifier + ENV_FILE_SUFFIX
    candidates = [(cwd or Path.cwd()) / file_name, config.config_dir / file_name]

    for candidate in candidates:
        if candidate.is_file():
            logger.debug(f"Using env file {candidate} for '{identifier}'")
            return candidate

    raise EnvFileNotFoundError(identifier, candidates)
