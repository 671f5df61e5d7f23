"""
load-env: resolve layered .env files, with variable references and command
substitution, into the environment for a launched process.
"""

__version__ = "0.1.0"
