"""
Translation cache backends: Redis hashes and an in-process dictionary.
"""

from typing import Dict, Optional, Tuple

import redis.asyncio as redis

from mstranslator.config.config import RedisConfig, config
from mstranslator.models.interfaces import CacheKey, TranslationCache
from mstranslator.utils.exceptions import CacheError
from mstranslator.utils.logging import cache_logger as logger


class RedisTranslationCache(TranslationCache):
    """Translation cache stored as one Redis hash per source text.

    The hash name is the text and each field is a target language, so all
    translations of a text live together. When keys include the source
    language the field becomes ``<source>><target>``.

    The client holds a connection pool for its whole lifetime; every command
    checks a connection out and returns it whether or not the command fails.
    """

    def __init__(self, client: Optional[redis.Redis] = None, redis_config: Optional[RedisConfig] = None):
        self.redis_config = redis_config or config.redis
        self.redis_client = client

    async def __aenter__(self) -> "RedisTranslationCache":
        await self._get_redis_client()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _get_redis_client(self) -> redis.Redis:
        """Get Redis client connection."""
        if not self.redis_client:
            if self.redis_config.url:
                self.redis_client = redis.Redis.from_url(
                    self.redis_config.url,
                    max_connections=self.redis_config.max_connections,
                    decode_responses=True
                )
            else:
                pool = redis.ConnectionPool(
                    host=self.redis_config.host,
                    port=self.redis_config.port,
                    password=self.redis_config.password,
                    db=self.redis_config.db,
                    max_connections=self.redis_config.max_connections,
                    decode_responses=True
                )
                self.redis_client = redis.Redis(connection_pool=pool)
        return self.redis_client

    async def close(self):
        """Release the connection pool."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.debug("Redis translation cache closed")

    @staticmethod
    def _locate(key: CacheKey) -> Tuple[str, str]:
        """Map a cache key to its (hash name, field) pair."""
        if key.source_lang:
            return key.text, f"{key.source_lang}>{key.target_lang}"
        return key.text, key.target_lang

    async def exists(self, key: CacheKey) -> bool:
        name, field = self._locate(key)
        try:
            client = await self._get_redis_client()
            return bool(await client.hexists(name, field))
        except redis.RedisError as e:
            raise CacheError(f"Cache exists check failed: {str(e)}", cache_key=str(key))

    async def get(self, key: CacheKey) -> Optional[str]:
        name, field = self._locate(key)
        try:
            client = await self._get_redis_client()
            value = await client.hget(name, field)
        except redis.RedisError as e:
            raise CacheError(f"Cache get failed: {str(e)}", cache_key=str(key))

        if value is not None:
            logger.debug(f"Getting from cache {key}")
        return value

    async def set(self, key: CacheKey, value: str) -> None:
        name, field = self._locate(key)
        try:
            client = await self._get_redis_client()
            await client.hset(name, field, value)
        except redis.RedisError as e:
            raise CacheError(f"Cache set failed: {str(e)}", cache_key=str(key))

        logger.debug(f"Add to cache {key}")


class InMemoryTranslationCache(TranslationCache):
    """Process-local translation cache.

    Entries never expire and are kept for the life of the process. Passing
    ``max_size`` bounds the cache: once full, the oldest tenth of the entries
    is evicted, so a bounded cache may send a text to the provider again.
    """

    def __init__(self, max_size: Optional[int] = None):
        self.entries: Dict[CacheKey, str] = {}
        self.max_size = max_size

    async def exists(self, key: CacheKey) -> bool:
        return key in self.entries

    async def get(self, key: CacheKey) -> Optional[str]:
        return self.entries.get(key)

    async def set(self, key: CacheKey, value: str) -> None:
        if self.max_size is not None and key not in self.entries and len(self.entries) >= self.max_size:
            self._evict()
        self.entries[key] = value

    def _evict(self):
        """Evict the oldest entries (insertion order)."""
        entries_to_remove = max(1, len(self.entries) // 10)
        for cache_key in list(self.entries)[:entries_to_remove]:
            del self.entries[cache_key]

    def clear(self):
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)
