"""
Translation service that gates calls on token validity and reconciles
batches against the translation cache.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mstranslator.config.config import CacheBackend, config
from mstranslator.models.interfaces import (
    AccessToken,
    CacheKey,
    TranslationBatchRequest,
    TranslationCache,
    TranslationProvider,
    TranslationRequest
)
from mstranslator.services.authority import DatamarketAuthority
from mstranslator.services.cache_store import InMemoryTranslationCache, RedisTranslationCache
from mstranslator.services.provider import MicrosoftTranslatorProvider
from mstranslator.services.token_manager import AccessTokenManager
from mstranslator.utils.exceptions import (
    CacheError,
    ConfigurationError,
    ProviderError,
    TokenExpiredError,
    ValidationError
)
from mstranslator.utils.logging import translation_logger as logger


@dataclass
class PendingBatch:
    """Cache misses of one batch call, in first-encounter order.

    ``positions[i]`` lists every input position that ``texts[i]`` must fill,
    so results sent back by the provider are routed by this map rather than
    by the input indexes themselves.
    """
    texts: List[str] = field(default_factory=list)
    positions: List[List[int]] = field(default_factory=list)
    _index: Dict[str, int] = field(default_factory=dict, repr=False)

    def __contains__(self, text: str) -> bool:
        return text in self._index

    def __len__(self) -> int:
        return len(self.texts)

    def add(self, text: str, position: int):
        """Record a miss; repeated texts only gain another target position."""
        sent_position = self._index.get(text)
        if sent_position is None:
            self._index[text] = len(self.texts)
            self.texts.append(text)
            self.positions.append([position])
        else:
            self.positions[sent_position].append(position)

    def route(self, translations: List[str], resolved: Dict[int, str]):
        """Place each provider result at every input position waiting for it."""
        for sent_position, translated in enumerate(translations):
            for position in self.positions[sent_position]:
                resolved[position] = translated


class TranslationService:
    """Cache-aware translation on top of a remote provider.

    Every operation first checks the access token with the token manager and
    raises ``TokenExpiredError`` before touching the cache or the network.
    Cache failures never fail a translation: read errors count as misses and
    write errors are logged while the result is still returned.
    """

    def __init__(
        self,
        token_manager: AccessTokenManager,
        provider: TranslationProvider,
        cache: Optional[TranslationCache] = None,
        include_source_language: Optional[bool] = None
    ):
        self.token_manager = token_manager
        self.provider = provider
        self.cache = cache
        if include_source_language is None:
            include_source_language = config.cache.include_source_language
        self.include_source_language = include_source_language

        self.stats = {
            "total_requests": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "cache_read_errors": 0,
            "cache_write_errors": 0,
            "provider_calls": 0
        }

    async def __aenter__(self) -> "TranslationService":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Release the resources held by the adapters.

        Every adapter is closed even when an earlier one fails; the first
        failure is re-raised afterwards.
        """
        errors = []
        for component in (self.provider, self.cache, self.token_manager.authority):
            close = getattr(component, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.error(f"Failed to close {type(component).__name__}: {str(e)}", event="close_failed")
                errors.append(e)

        if errors:
            raise errors[0]

    async def translate(self, token: AccessToken, request: TranslationRequest,
                        cache_enabled: Optional[bool] = None) -> str:
        """Translate a single text, serving it from the cache when possible."""
        self._ensure_token_valid(token)
        self._validate_languages(request.source_lang, request.target_lang)
        self._validate_text(request.text, "text")

        use_cache = self._use_cache(cache_enabled)
        self.stats["total_requests"] += 1
        key = self._cache_key(request.text, request.source_lang, request.target_lang)

        if use_cache:
            cached = await self._lookup(key)
            if cached is not None:
                self.stats["cache_hits"] += 1
                logger.debug(f"Getting from cache {key}", event="cache_hit")
                return cached
            self.stats["cache_misses"] += 1

        translated = await self._call_provider(
            "translate",
            self.provider.translate_one,
            token, request.text, request.source_lang, request.target_lang
        )

        if use_cache:
            await self._store(key, translated)

        return translated

    async def translate_batch(self, token: AccessToken, request: TranslationBatchRequest,
                              cache_enabled: Optional[bool] = None) -> List[str]:
        """Translate an ordered batch; ``result[i]`` is the translation of ``texts[i]``.

        Only texts missing from the cache are sent to the provider, each of
        them once, in a single call. Results are written through to the cache
        and merged with the cached ones in input order.
        """
        self._ensure_token_valid(token)
        self._validate_languages(request.source_lang, request.target_lang)
        self._validate_texts(request.texts)

        texts = request.texts
        if not texts:
            return []

        use_cache = self._use_cache(cache_enabled)
        self.stats["total_requests"] += 1

        resolved: Dict[int, str] = {}
        known: Dict[str, str] = {}
        pending = PendingBatch()

        for position, text in enumerate(texts):
            if text in pending:
                pending.add(text, position)
                continue

            if use_cache:
                if text not in known:
                    cached = await self._lookup(
                        self._cache_key(text, request.source_lang, request.target_lang)
                    )
                    if cached is not None:
                        known[text] = cached
                if text in known:
                    resolved[position] = known[text]
                    continue

            pending.add(text, position)

        # Counted per input position, like one translate() call per text.
        hits = len(resolved)
        if use_cache:
            self.stats["cache_hits"] += hits
            self.stats["cache_misses"] += len(texts) - hits

        if pending:
            translations = await self._call_provider(
                "translate_batch",
                self.provider.translate_batch,
                token, pending.texts, request.source_lang, request.target_lang
            )
            if len(translations) != len(pending):
                raise ProviderError(
                    f"Provider returned {len(translations)} translations for {len(pending)} texts",
                    operation="translate_batch",
                    details={"sent": len(pending), "received": len(translations)}
                )

            if use_cache:
                for text, translated in zip(pending.texts, translations):
                    await self._store(
                        self._cache_key(text, request.source_lang, request.target_lang),
                        translated
                    )

            pending.route(translations, resolved)

        logger.batch_reconciled(
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            total=len(texts),
            hits=hits,
            sent=len(pending),
            cache_enabled=use_cache
        )

        return [resolved[position] for position in range(len(texts))]

    async def detect_languages(self, token: AccessToken, texts: List[str]) -> List[str]:
        """Detect the language of each text with a single provider call."""
        self._ensure_token_valid(token)
        self._validate_texts(texts)

        if not texts:
            return []

        self.stats["total_requests"] += 1
        languages = await self._call_provider("detect_languages", self.provider.detect_batch, token, texts)

        if len(languages) != len(texts):
            raise ProviderError(
                f"Provider returned {len(languages)} languages for {len(texts)} texts",
                operation="detect_languages",
                details={"sent": len(texts), "received": len(languages)}
            )
        return list(languages)

    def get_stats(self) -> Dict[str, Any]:
        """Get translation and cache statistics."""
        lookups = self.stats["cache_hits"] + self.stats["cache_misses"]
        hit_rate = (self.stats["cache_hits"] / lookups * 100) if lookups > 0 else 0

        return {
            **self.stats,
            "hit_rate_percentage": round(hit_rate, 2)
        }

    def _ensure_token_valid(self, token: AccessToken):
        if self.token_manager.is_expired(token):
            raise TokenExpiredError(deadline=token.deadline)

    def _use_cache(self, cache_enabled: Optional[bool]) -> bool:
        if cache_enabled is None:
            return self.cache is not None
        if cache_enabled and self.cache is None:
            raise ConfigurationError("Caching was requested but no translation cache is configured",
                                     config_key="CACHE_ENABLED")
        return cache_enabled

    def _cache_key(self, text: str, source_lang: Optional[str], target_lang: str) -> CacheKey:
        return CacheKey.for_text(text, source_lang, target_lang, self.include_source_language)

    async def _lookup(self, key: CacheKey) -> Optional[str]:
        """Read a cached translation; backend failures count as a miss."""
        try:
            if not await self.cache.exists(key):
                return None
            return await self.cache.get(key)
        except CacheError as e:
            self.stats["cache_read_errors"] += 1
            logger.warning(
                f"Cache read failed, treating as miss: {e.message}",
                event="cache_read_failed",
                metadata={"target_language": key.target_lang}
            )
            return None

    async def _store(self, key: CacheKey, value: str):
        """Write a translation through to the cache; failures are reported, not raised."""
        try:
            await self.cache.set(key, value)
        except CacheError as e:
            self.stats["cache_write_errors"] += 1
            logger.cache_write_failed(str(key), key.target_lang, e.message)

    async def _call_provider(self, operation: str, call: Callable[..., Awaitable[Any]], *args):
        self.stats["provider_calls"] += 1
        try:
            return await call(*args)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Provider call {operation} failed: {str(e)}", event="provider_failed", exc_info=True)
            raise ProviderError(f"Provider call {operation} failed: {str(e)}", operation=operation)

    @staticmethod
    def _validate_languages(source_lang: Optional[str], target_lang: str):
        if not isinstance(target_lang, str) or not target_lang.strip():
            raise ValidationError("Target language is required", field="target_lang")
        if source_lang is not None and not isinstance(source_lang, str):
            raise ValidationError("Source language must be a string", field="source_lang")

    @staticmethod
    def _validate_text(text: Any, field_name: str):
        if not isinstance(text, str):
            raise ValidationError(f"{field_name} must be a string, got {type(text).__name__}",
                                  field=field_name)

    def _validate_texts(self, texts: Any):
        if not isinstance(texts, (list, tuple)):
            raise ValidationError("texts must be a list of strings", field="texts")
        for position, text in enumerate(texts):
            self._validate_text(text, f"texts[{position}]")


def create_translation_cache() -> Optional[TranslationCache]:
    """Create the configured translation cache, or None when caching is disabled."""
    if not config.cache.enabled:
        return None
    if config.cache.backend == CacheBackend.MEMORY:
        return InMemoryTranslationCache()
    return RedisTranslationCache()


def create_translation_service(cache: Optional[TranslationCache] = None) -> TranslationService:
    """Factory function to create a translation service wired from configuration."""
    token_manager = AccessTokenManager(DatamarketAuthority())
    return TranslationService(
        token_manager=token_manager,
        provider=MicrosoftTranslatorProvider(),
        cache=cache if cache is not None else create_translation_cache()
    )
