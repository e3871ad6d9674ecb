"""
Services package for the translator client.
"""

from .token_manager import AccessTokenManager, SystemClock, credential_from_config
from .authority import DatamarketAuthority
from .provider import MicrosoftTranslatorProvider
from .cache_store import RedisTranslationCache, InMemoryTranslationCache
from .translation_service import (
    TranslationService,
    PendingBatch,
    create_translation_cache,
    create_translation_service
)

__all__ = [
    "AccessTokenManager",
    "SystemClock",
    "credential_from_config",
    "DatamarketAuthority",
    "MicrosoftTranslatorProvider",
    "RedisTranslationCache",
    "InMemoryTranslationCache",
    "TranslationService",
    "PendingBatch",
    "create_translation_cache",
    "create_translation_service"
]
