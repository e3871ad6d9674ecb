"""
Microsoft Translator HTTP provider (v2 XML endpoints).
"""

import xml.etree.ElementTree as ET
from typing import List, Optional
from xml.sax.saxutils import escape

import httpx

from mstranslator.models.interfaces import AccessToken, TranslationProvider
from mstranslator.services.http_client import HTTPServiceClient
from mstranslator.utils.exceptions import ProviderError
from mstranslator.utils.logging import provider_logger as logger

SERVICE_NS = "http://schemas.datacontract.org/2004/07/Microsoft.MT.Web.Service.V2"
ARRAYS_NS = "http://schemas.microsoft.com/2003/10/Serialization/Arrays"

TRANSLATE_ARRAY_TEMPLATE = (
    "<TranslateArrayRequest>"
    "<AppId />"
    "<From>{source}</From>"
    "<Options>"
    '<Category xmlns="{ns}"></Category>'
    '<ContentType xmlns="{ns}">text/plain</ContentType>'
    '<ReservedFlags xmlns="{ns}" />'
    '<State xmlns="{ns}"></State>'
    '<Uri xmlns="{ns}"></Uri>'
    '<User xmlns="{ns}"></User>'
    "</Options>"
    "<Texts>{texts}</Texts>"
    "<To>{target}</To>"
    "</TranslateArrayRequest>"
)
DETECT_ARRAY_TEMPLATE = '<ArrayOfstring xmlns="{ns}">{texts}</ArrayOfstring>'
STRING_TEMPLATE = '<string xmlns="{ns}">{text}</string>'


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _string_elements(texts: List[str]) -> str:
    return "".join(STRING_TEMPLATE.format(ns=ARRAYS_NS, text=escape(text)) for text in texts)


def build_translate_array_body(texts: List[str], source_lang: Optional[str], target_lang: str) -> str:
    """Build the TranslateArray request envelope."""
    return TRANSLATE_ARRAY_TEMPLATE.format(
        ns=SERVICE_NS,
        source=escape(source_lang or ""),
        target=escape(target_lang),
        texts=_string_elements(texts)
    )


def build_detect_array_body(texts: List[str]) -> str:
    """Build the DetectArray request envelope."""
    return DETECT_ARRAY_TEMPLATE.format(ns=ARRAYS_NS, texts=_string_elements(texts))


def _parse(body: str, operation: str) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise ProviderError(f"Unparseable {operation} response: {str(e)}", operation=operation)


def parse_translate_response(body: str) -> str:
    """Parse ``<string>translated</string>``."""
    root = _parse(body, "translate")
    if _local_name(root.tag) != "string":
        raise ProviderError(f"Unexpected translate response element: {_local_name(root.tag)}",
                            operation="translate")
    return root.text or ""


def parse_translate_array_response(body: str) -> List[str]:
    """Parse the TranslatedText of every TranslateArrayResponse, in document order."""
    root = _parse(body, "translate_array")
    results = []
    for element in root.iter():
        if _local_name(element.tag) != "TranslateArrayResponse":
            continue
        translated = next(
            (child for child in element if _local_name(child.tag) == "TranslatedText"),
            None
        )
        if translated is None:
            raise ProviderError("TranslateArrayResponse without TranslatedText",
                                operation="translate_array")
        results.append(translated.text or "")
    return results


def parse_detect_array_response(body: str) -> List[str]:
    """Parse ``<ArrayOfstring><string>lang</string>...</ArrayOfstring>``."""
    root = _parse(body, "detect_array")
    return [(child.text or "") for child in root if _local_name(child.tag) == "string"]


class MicrosoftTranslatorProvider(HTTPServiceClient, TranslationProvider):
    """Translation provider backed by the Microsoft Translator v2 HTTP API."""

    def _auth_headers(self, token: AccessToken) -> dict:
        return {"Authorization": f"Bearer {token.value}"}

    async def _send(self, operation: str, method: str, url: str, **kwargs) -> str:
        """Execute a request and return the body of a successful response."""
        http_client = await self._get_http_client()
        try:
            response = await http_client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            raise ProviderError(f"{operation} request timed out", operation=operation)
        except httpx.RequestError as e:
            raise ProviderError(f"{operation} request failed: {str(e)}", operation=operation)

        if response.status_code != 200:
            logger.warning(
                f"{operation} failed with status {response.status_code}",
                event="provider_request_failed",
                metadata={
                    "operation": operation,
                    "status_code": response.status_code
                }
            )
            raise ProviderError(
                f"{operation} failed with status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
                details={"body": response.text[:200]}
            )
        return response.text

    async def translate_one(self, token: AccessToken, text: str,
                            source_lang: Optional[str], target_lang: str) -> str:
        body = await self._send(
            "translate",
            "GET",
            self.translator_config.translate_url,
            params={"text": text, "from": source_lang or "", "to": target_lang},
            headers=self._auth_headers(token)
        )
        return parse_translate_response(body)

    async def translate_batch(self, token: AccessToken, texts: List[str],
                              source_lang: Optional[str], target_lang: str) -> List[str]:
        headers = self._auth_headers(token)
        headers["Content-Type"] = "text/xml"
        body = await self._send(
            "translate_array",
            "POST",
            self.translator_config.translate_array_url,
            content=build_translate_array_body(texts, source_lang, target_lang).encode("utf-8"),
            headers=headers
        )
        results = parse_translate_array_response(body)
        logger.debug(
            "TranslateArray completed",
            event="translate_array",
            metrics={"sent": len(texts), "received": len(results)}
        )
        return results

    async def detect_batch(self, token: AccessToken, texts: List[str]) -> List[str]:
        headers = self._auth_headers(token)
        headers["Content-Type"] = "text/xml"
        body = await self._send(
            "detect_array",
            "POST",
            self.translator_config.detect_array_url,
            content=build_detect_array_body(texts).encode("utf-8"),
            headers=headers
        )
        return parse_detect_array_response(body)
