"""
Pytest configuration and fixtures for the translator client tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from mstranslator.models.interfaces import (
    AccessToken,
    CacheKey,
    Clock,
    Credential,
    TokenAuthority,
    TokenGrant,
    TranslationProvider
)
from mstranslator.services.cache_store import InMemoryTranslationCache
from mstranslator.services.token_manager import AccessTokenManager
from mstranslator.services.translation_service import TranslationService
from mstranslator.utils.exceptions import CacheError


class FakeClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float):
        self.current += timedelta(seconds=seconds)


class StaticAuthority(TokenAuthority):
    """Authority returning a fixed grant and recording the credentials it saw."""

    def __init__(self, grant: TokenGrant):
        self.grant = grant
        self.exchanged: List[Credential] = []

    async def exchange(self, credential: Credential) -> TokenGrant:
        self.exchanged.append(credential)
        return self.grant


class RecordingProvider(TranslationProvider):
    """Provider translating from a dictionary and recording every call."""

    def __init__(self, dictionary: Optional[Dict[str, str]] = None,
                 languages: Optional[Dict[str, str]] = None):
        self.dictionary = dictionary or {}
        self.languages = languages or {}
        self.single_calls: List[str] = []
        self.batch_calls: List[List[str]] = []
        self.detect_calls: List[List[str]] = []

    def _translate(self, text: str, target_lang: str) -> str:
        return self.dictionary.get(text, f"{text}@{target_lang}")

    async def translate_one(self, token, text, source_lang, target_lang):
        self.single_calls.append(text)
        return self._translate(text, target_lang)

    async def translate_batch(self, token, texts, source_lang, target_lang):
        self.batch_calls.append(list(texts))
        return [self._translate(text, target_lang) for text in texts]

    async def detect_batch(self, token, texts):
        self.detect_calls.append(list(texts))
        return [self.languages.get(text, "en") for text in texts]

    @property
    def call_count(self) -> int:
        return len(self.single_calls) + len(self.batch_calls) + len(self.detect_calls)


class FlakyCache(InMemoryTranslationCache):
    """In-memory cache whose reads and/or writes can be made to fail."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = False):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.reads: List[CacheKey] = []
        self.writes: List[CacheKey] = []

    async def exists(self, key):
        self.reads.append(key)
        if self.fail_reads:
            raise CacheError("connection refused", cache_key=str(key))
        return await super().exists(key)

    async def get(self, key):
        if self.fail_reads:
            raise CacheError("connection refused", cache_key=str(key))
        return await super().get(key)

    async def set(self, key, value):
        self.writes.append(key)
        if self.fail_writes:
            raise CacheError("read-only replica", cache_key=str(key))
        await super().set(key, value)


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def credential():
    """Create sample client credentials."""
    return Credential(client_id="a", client_secret="b")


@pytest.fixture
def token_grant():
    """Create a sample grant with a ten minute lifetime."""
    return TokenGrant(
        access_token="token-value",
        expires_in="600",
        scope="http://api.microsofttranslator.com",
        token_type="http://schemas.xmlsoap.org/ws/2009/11/swt-token-profile-1.0"
    )


@pytest.fixture
def authority(token_grant):
    return StaticAuthority(token_grant)


@pytest.fixture
def token_manager(authority, clock):
    """Create a token manager driven by the fake clock."""
    return AccessTokenManager(authority, clock=clock)


@pytest.fixture
def valid_token(clock):
    """Create a token valid for ten minutes from the fake clock's now."""
    return AccessToken(
        value="token-value",
        granted_scope="http://api.microsofttranslator.com",
        issued_at=clock.now(),
        expires_after=timedelta(seconds=600)
    )


@pytest.fixture
def expired_token(clock):
    """Create a token whose deadline has already passed."""
    return AccessToken(
        value="stale-token",
        granted_scope="http://api.microsofttranslator.com",
        issued_at=clock.now() - timedelta(seconds=601),
        expires_after=timedelta(seconds=600)
    )


@pytest.fixture
def provider():
    return RecordingProvider({"um": "one", "dois": "two", "hi": "hello", "bye": "goodbye"})


@pytest.fixture
def cache():
    return FlakyCache()


@pytest.fixture
def translation_service(token_manager, provider, cache):
    """Create a translation service wired with in-memory collaborators."""
    return TranslationService(token_manager, provider, cache, include_source_language=False)
