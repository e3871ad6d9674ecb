"""
OAuth2 client-credentials exchange against the datamarket token endpoint.
"""

import httpx

from mstranslator.models.interfaces import Credential, TokenAuthority, TokenGrant
from mstranslator.services.http_client import HTTPServiceClient
from mstranslator.utils.exceptions import AuthError
from mstranslator.utils.logging import auth_logger as logger


class DatamarketAuthority(HTTPServiceClient, TokenAuthority):
    """Token authority speaking the form-encoded client_credentials grant."""

    async def exchange(self, credential: Credential) -> TokenGrant:
        """POST the credential and parse the JSON token response."""
        form = {
            "client_id": credential.client_id,
            "client_secret": credential.client_secret,
            "scope": self.translator_config.scope,
            "grant_type": self.translator_config.grant_type
        }

        http_client = await self._get_http_client()
        try:
            response = await http_client.post(
                self.translator_config.auth_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"}
            )
        except httpx.TimeoutException:
            raise AuthError("Token request timed out",
                            details={"url": self.translator_config.auth_url})
        except httpx.RequestError as e:
            raise AuthError(f"Token request failed: {str(e)}",
                            details={"url": self.translator_config.auth_url})

        if response.status_code != 200:
            logger.warning(
                f"Token request failed with status {response.status_code}",
                event="token_exchange_rejected",
                metadata={
                    "client_id": credential.client_id,
                    "status_code": response.status_code
                }
            )
            raise AuthError(
                f"Token request failed with status {response.status_code}",
                details={"status_code": response.status_code}
            )

        try:
            payload = response.json()
        except ValueError:
            raise AuthError("Token response is not valid JSON",
                            details={"body": response.text[:200]})

        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise AuthError("Token response did not contain an access token")

        return TokenGrant(
            access_token=payload["access_token"],
            expires_in=payload.get("expires_in"),
            scope=payload.get("scope", ""),
            token_type=payload.get("token_type", "")
        )
