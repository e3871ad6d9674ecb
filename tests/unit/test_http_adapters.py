"""
Unit tests for the HTTP authority and provider adapters.
"""

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import httpx
import pytest

from mstranslator.config.config import TranslatorConfig
from mstranslator.models.interfaces import AccessToken, Credential
from mstranslator.services.authority import DatamarketAuthority
from mstranslator.services.provider import (
    MicrosoftTranslatorProvider,
    build_translate_array_body,
    parse_detect_array_response,
    parse_translate_array_response,
    parse_translate_response
)
from mstranslator.utils.exceptions import AuthError, ProviderError

TRANSLATE_ARRAY_RESPONSE = (
    '<ArrayOfTranslateArrayResponse xmlns="http://schemas.datacontract.org/2004/07/Microsoft.MT.Web.Service.V2" '
    'xmlns:i="http://www.w3.org/2001/XMLSchema-instance">'
    "<TranslateArrayResponse><From>pt</From><OriginalTextSentenceLengths/>"
    "<TranslatedText>one</TranslatedText><TranslatedTextSentenceLengths/></TranslateArrayResponse>"
    "<TranslateArrayResponse><From>pt</From><OriginalTextSentenceLengths/>"
    "<TranslatedText>two</TranslatedText><TranslatedTextSentenceLengths/></TranslateArrayResponse>"
    "</ArrayOfTranslateArrayResponse>"
)
DETECT_ARRAY_RESPONSE = (
    '<ArrayOfstring xmlns="http://schemas.microsoft.com/2003/10/Serialization/Arrays" '
    'xmlns:i="http://www.w3.org/2001/XMLSchema-instance">'
    "<string>es</string><string>fr</string></ArrayOfstring>"
)


@pytest.fixture
def translator_config():
    return TranslatorConfig(
        auth_url="https://auth.test/token",
        translate_url="https://api.test/Translate",
        translate_array_url="https://api.test/TranslateArray",
        detect_array_url="https://api.test/DetectArray"
    )


@pytest.fixture
def access_token():
    return AccessToken(
        value="abc123",
        granted_scope="http://api.microsofttranslator.com",
        issued_at=datetime.now(timezone.utc),
        expires_after=timedelta(minutes=10)
    )


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDatamarketAuthority:
    """Test the credential exchange adapter."""

    @pytest.mark.asyncio
    async def test_exchange_posts_form(self, translator_config):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={
                "access_token": "token_mock_id",
                "token_type": "http://schemas.xmlsoap.org/ws/2009/11/swt-token-profile-1.0",
                "expires_in": "600",
                "scope": "http://api.microsofttranslator.com"
            })

        authority = DatamarketAuthority(mock_client(handler), translator_config)
        grant = await authority.exchange(Credential(client_id="translate1", client_secret="translates3cr3t"))
        await authority.close()

        assert seen["url"] == "https://auth.test/token"
        assert seen["form"] == {
            "client_id": ["translate1"],
            "client_secret": ["translates3cr3t"],
            "scope": ["http://api.microsofttranslator.com"],
            "grant_type": ["client_credentials"]
        }
        assert grant.access_token == "token_mock_id"
        assert grant.expires_in == "600"
        assert grant.scope == "http://api.microsofttranslator.com"

    @pytest.mark.asyncio
    async def test_exchange_rejected(self, translator_config):
        def handler(request):
            return httpx.Response(400, json={"error": "invalid_client"})

        async with DatamarketAuthority(mock_client(handler), translator_config) as authority:
            with pytest.raises(AuthError) as exc_info:
                await authority.exchange(Credential("a", "b"))

        assert exc_info.value.details["status_code"] == 400

    @pytest.mark.asyncio
    async def test_exchange_invalid_json(self, translator_config):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        async with DatamarketAuthority(mock_client(handler), translator_config) as authority:
            with pytest.raises(AuthError):
                await authority.exchange(Credential("a", "b"))

    @pytest.mark.asyncio
    async def test_exchange_missing_token(self, translator_config):
        def handler(request):
            return httpx.Response(200, json={"token_id": "token_mock_id", "expires_in": "600"})

        async with DatamarketAuthority(mock_client(handler), translator_config) as authority:
            with pytest.raises(AuthError):
                await authority.exchange(Credential("a", "b"))

    @pytest.mark.asyncio
    async def test_exchange_transport_failure(self, translator_config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with DatamarketAuthority(mock_client(handler), translator_config) as authority:
            with pytest.raises(AuthError):
                await authority.exchange(Credential("a", "b"))


class TestMicrosoftTranslatorProvider:
    """Test the translation provider adapter."""

    @pytest.mark.asyncio
    async def test_translate_one(self, translator_config, access_token):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            seen["authorization"] = request.headers["Authorization"]
            return httpx.Response(
                200,
                text='<string xmlns="http://schemas.microsoft.com/2003/10/Serialization/">Hola &amp; adiós</string>'
            )

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            result = await provider.translate_one(access_token, "Hello & goodbye", "en", "es")

        assert result == "Hola & adiós"
        assert seen["params"] == {"text": "Hello & goodbye", "from": "en", "to": "es"}
        assert seen["authorization"] == "Bearer abc123"

    @pytest.mark.asyncio
    async def test_translate_batch(self, translator_config, access_token):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content.decode("utf-8")
            return httpx.Response(200, text=TRANSLATE_ARRAY_RESPONSE)

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            result = await provider.translate_batch(access_token, ["um", "dois"], "pt", "en")

        assert result == ["one", "two"]
        assert seen["url"] == "https://api.test/TranslateArray"
        assert seen["content_type"] == "text/xml"
        assert "<From>pt</From>" in seen["body"]
        assert "<To>en</To>" in seen["body"]
        assert seen["body"].index(">um<") < seen["body"].index(">dois<")

    @pytest.mark.asyncio
    async def test_translate_batch_without_source_language(self, translator_config, access_token):
        seen = {}

        def handler(request):
            seen["body"] = request.content.decode("utf-8")
            return httpx.Response(200, text=TRANSLATE_ARRAY_RESPONSE)

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            result = await provider.translate_batch(access_token, ["um", "dois"], None, "en")

        assert result == ["one", "two"]
        assert "<From></From>" in seen["body"]
        assert "None" not in seen["body"]

    @pytest.mark.asyncio
    async def test_translate_one_without_source_language(self, translator_config, access_token):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, text='<string xmlns="x">one</string>')

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            result = await provider.translate_one(access_token, "um", None, "en")

        assert result == "one"
        assert seen["params"] == {"text": "um", "from": "", "to": "en"}

    @pytest.mark.asyncio
    async def test_detect_batch(self, translator_config, access_token):
        def handler(request):
            assert "Hola &lt;b&gt;" in request.content.decode("utf-8")
            return httpx.Response(200, text=DETECT_ARRAY_RESPONSE)

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            result = await provider.detect_batch(access_token, ["Hola <b>", "Bonjour"])

        assert result == ["es", "fr"]

    @pytest.mark.asyncio
    async def test_error_status(self, translator_config, access_token):
        def handler(request):
            return httpx.Response(401, text="ArgumentException: The incoming token has expired.")

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            with pytest.raises(ProviderError) as exc_info:
                await provider.translate_one(access_token, "hi", "en", "es")

        assert exc_info.value.status_code == 401
        assert exc_info.value.operation == "translate"

    @pytest.mark.asyncio
    async def test_transport_failure(self, translator_config, access_token):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with MicrosoftTranslatorProvider(mock_client(handler), translator_config) as provider:
            with pytest.raises(ProviderError):
                await provider.translate_batch(access_token, ["um"], "pt", "en")

    @pytest.mark.asyncio
    async def test_close_releases_client(self, translator_config):
        client = mock_client(lambda request: httpx.Response(200))
        provider = MicrosoftTranslatorProvider(client, translator_config)

        await provider.close()

        assert provider.http_client is None
        assert client.is_closed


class TestWireFormat:
    """Test XML envelopes."""

    def test_build_translate_array_body_escapes_text(self):
        body = build_translate_array_body(["a < b", "Tom & Jerry"], "en", "pt")

        assert "a &lt; b" in body
        assert "Tom &amp; Jerry" in body
        assert "<ContentType" in body and "text/plain</ContentType>" in body

    def test_build_translate_array_body_without_source(self):
        body = build_translate_array_body(["um"], None, "en")

        assert "<From></From>" in body
        assert "<To>en</To>" in body

    def test_parse_translate_array_response(self):
        assert parse_translate_array_response(TRANSLATE_ARRAY_RESPONSE) == ["one", "two"]

    def test_parse_translate_array_response_missing_text(self):
        body = "<ArrayOfTranslateArrayResponse><TranslateArrayResponse><From>pt</From>" \
               "</TranslateArrayResponse></ArrayOfTranslateArrayResponse>"

        with pytest.raises(ProviderError):
            parse_translate_array_response(body)

    def test_parse_detect_array_response(self):
        assert parse_detect_array_response(DETECT_ARRAY_RESPONSE) == ["es", "fr"]

    def test_parse_translate_response_empty(self):
        assert parse_translate_response('<string xmlns="x"/>') == ""

    def test_parse_malformed(self):
        with pytest.raises(ProviderError):
            parse_translate_response("<string>unterminated")

    def test_parse_unexpected_root(self):
        body = json.dumps({"text": "hola"})

        with pytest.raises(ProviderError):
            parse_translate_response(body)
