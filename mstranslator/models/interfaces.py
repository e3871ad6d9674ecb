"""
Core interfaces and data models for the translator client.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Union


@dataclass(frozen=True)
class Credential:
    """Client credentials exchanged for an access token."""
    client_id: str
    client_secret: str = field(repr=False)


@dataclass(frozen=True)
class TokenGrant:
    """Raw answer of the token authority, before the lifetime is parsed."""
    access_token: str
    expires_in: Union[str, int, None]
    scope: str = ""
    token_type: str = ""


@dataclass(frozen=True)
class AccessToken:
    """Short-lived bearer token required by the translation provider."""
    value: str = field(repr=False)
    granted_scope: str
    issued_at: datetime
    expires_after: timedelta
    token_type: str = "bearer"

    @property
    def deadline(self) -> datetime:
        return self.issued_at + self.expires_after

    def is_expired_at(self, now: datetime) -> bool:
        return now >= self.deadline


@dataclass
class TranslationRequest:
    """Request model for a single translation."""
    text: str
    source_lang: Optional[str]
    target_lang: str


@dataclass
class TranslationBatchRequest:
    """Request model for an ordered batch translation. Duplicates are allowed."""
    texts: List[str]
    source_lang: Optional[str]
    target_lang: str


@dataclass(frozen=True)
class CacheKey:
    """Key under which a translated value is memoized.

    ``source_lang`` is only set when the cache is configured to include the
    source language in its keys; by default two requests for the same text
    and target share one entry whatever their source language.
    """
    text: str
    target_lang: str
    source_lang: Optional[str] = None

    @classmethod
    def for_text(cls, text: str, source_lang: str, target_lang: str,
                 include_source_language: bool = False) -> "CacheKey":
        return cls(
            text=text,
            target_lang=target_lang,
            source_lang=source_lang if include_source_language else None
        )

    def __str__(self) -> str:
        if self.source_lang:
            return f"{self.source_lang}:{self.text}->{self.target_lang}"
        return f"{self.text}->{self.target_lang}"


class Clock(ABC):
    """Single source of the current time for the token lifecycle."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        pass


class TranslationCache(ABC):
    """Abstract interface for the translation key/value store.

    Implementations raise ``CacheError`` when the backend fails.
    """

    @abstractmethod
    async def exists(self, key: CacheKey) -> bool:
        """Check whether a translation is stored under the key."""
        pass

    @abstractmethod
    async def get(self, key: CacheKey) -> Optional[str]:
        """Get the stored translation, or None."""
        pass

    @abstractmethod
    async def set(self, key: CacheKey, value: str) -> None:
        """Store a translation."""
        pass


class TranslationProvider(ABC):
    """Abstract interface for the remote translation service.

    Implementations raise ``ProviderError`` on transport or wire-format failures.
    """

    @abstractmethod
    async def translate_one(self, token: AccessToken, text: str,
                            source_lang: Optional[str], target_lang: str) -> str:
        """Translate a single text."""
        pass

    @abstractmethod
    async def translate_batch(self, token: AccessToken, texts: List[str],
                              source_lang: Optional[str], target_lang: str) -> List[str]:
        """Translate texts, returning one result per input in the same order."""
        pass

    @abstractmethod
    async def detect_batch(self, token: AccessToken, texts: List[str]) -> List[str]:
        """Detect the language of each text, in the same order."""
        pass


class TokenAuthority(ABC):
    """Abstract interface for the credential exchange endpoint.

    Implementations raise ``AuthError`` when the exchange fails.
    """

    @abstractmethod
    async def exchange(self, credential: Credential) -> TokenGrant:
        """Exchange client credentials for a raw token grant."""
        pass
