"""Security module for secret-store lookups and masking."""

from .secrets import SecretLookupPass, SecretsMaskingFilter, SecretsRegistry

__all__ = ['SecretLookupPass', 'SecretsMaskingFilter', 'SecretsRegistry']
