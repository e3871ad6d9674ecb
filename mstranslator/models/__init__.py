"""
Models package for the translator client.
"""

from .interfaces import (
    Credential,
    TokenGrant,
    AccessToken,
    TranslationRequest,
    TranslationBatchRequest,
    CacheKey,
    Clock,
    TranslationCache,
    TranslationProvider,
    TokenAuthority
)

__all__ = [
    "Credential",
    "TokenGrant",
    "AccessToken",
    "TranslationRequest",
    "TranslationBatchRequest",
    "CacheKey",
    "Clock",
    "TranslationCache",
    "TranslationProvider",
    "TokenAuthority"
]
