"""
Utilities package for the translator client.
"""

from .exceptions import (
    TranslatorClientException,
    ValidationError,
    AuthError,
    TokenExpiredError,
    ProviderError,
    CacheError,
    ConfigurationError,
    create_error_response
)

__all__ = [
    "TranslatorClientException",
    "ValidationError",
    "AuthError",
    "TokenExpiredError",
    "ProviderError",
    "CacheError",
    "ConfigurationError",
    "create_error_response"
]
