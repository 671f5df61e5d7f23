"""CLI command handlers."""

from .run import run_load_env

__all__ = ['run_load_env']
