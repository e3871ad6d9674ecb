"""
Shared HTTP client handling for the remote service adapters.
"""

from typing import Optional

import httpx

from mstranslator.config.config import TranslatorConfig, config


class HTTPServiceClient:
    """Base for adapters that talk to the translator over HTTP.

    The ``httpx.AsyncClient`` is created on first use and kept until
    ``close()``; one can also be injected, in which case the adapter still
    closes it.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None,
                 translator_config: Optional[TranslatorConfig] = None):
        self.translator_config = translator_config or config.translator
        self.http_client = http_client
        self.timeout = self.translator_config.timeout_seconds

    async def __aenter__(self):
        await self._get_http_client()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get HTTP client for provider requests."""
        if not self.http_client:
            self.http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self.http_client

    async def close(self):
        """Close the HTTP client."""
        if self.http_client:
            await self.http_client.aclose()
            self.http_client = None
