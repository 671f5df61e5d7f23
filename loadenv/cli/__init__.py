"""Command-line interface for load-env."""
