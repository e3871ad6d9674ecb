"""
Access token lifecycle: credential exchange and expiry tracking.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from mstranslator.config.config import config
from mstranslator.models.interfaces import AccessToken, Clock, Credential, TokenAuthority, TokenGrant
from mstranslator.utils.exceptions import AuthError, ConfigurationError
from mstranslator.utils.logging import auth_logger as logger


class SystemClock(Clock):
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class AccessTokenManager:
    """Exchanges credentials for access tokens and answers validity queries.

    Tokens are never renewed automatically: callers check ``is_expired`` (the
    translation service does so before every call) and acquire a new token
    themselves.
    """

    def __init__(self, authority: TokenAuthority, clock: Optional[Clock] = None):
        self.authority = authority
        self.clock = clock or SystemClock()

    async def acquire(self, credential: Credential) -> AccessToken:
        """Exchange a credential for a new access token."""
        try:
            grant = await self.authority.exchange(credential)
        except AuthError:
            raise
        except Exception as e:
            logger.error(
                f"Credential exchange failed: {str(e)}",
                event="token_exchange_failed",
                metadata={"client_id": credential.client_id},
                exc_info=True
            )
            raise AuthError(f"Credential exchange failed: {str(e)}")

        if not grant.access_token:
            raise AuthError("Token response did not contain an access token",
                            details={"client_id": credential.client_id})

        lifetime = self._parse_lifetime(grant)
        issued_at = self.clock.now()

        token = AccessToken(
            value=grant.access_token,
            granted_scope=grant.scope,
            issued_at=issued_at,
            expires_after=timedelta(seconds=lifetime),
            token_type=grant.token_type or "bearer"
        )

        logger.token_acquired(
            scope=token.granted_scope,
            token_type=token.token_type,
            expires_in_seconds=lifetime,
            deadline=token.deadline
        )
        return token

    def is_expired(self, token: AccessToken) -> bool:
        """Return True once the current time has reached the token deadline."""
        return token.is_expired_at(self.clock.now())

    def seconds_remaining(self, token: AccessToken) -> float:
        """Seconds until the token deadline, never negative."""
        remaining = (token.deadline - self.clock.now()).total_seconds()
        return max(0.0, remaining)

    def _parse_lifetime(self, grant: TokenGrant) -> int:
        """Parse the lifetime returned by the authority as whole seconds."""
        raw = grant.expires_in
        if isinstance(raw, bool) or raw is None:
            raise AuthError("Token response did not contain a lifetime",
                            details={"expires_in": raw})
        try:
            lifetime = int(str(raw).strip())
        except ValueError:
            raise AuthError(f"Token lifetime is not an integer: '{raw}'",
                            details={"expires_in": raw})

        if lifetime < 0:
            raise AuthError(f"Token lifetime is negative: {lifetime}",
                            details={"expires_in": raw})
        return lifetime


def credential_from_config() -> Credential:
    """Build the client credential from MS_CLIENT_ID / MS_CLIENT_SECRET."""
    translator_config = config.translator
    if not translator_config.client_id or not translator_config.client_secret:
        raise ConfigurationError(
            "MS_CLIENT_ID and MS_CLIENT_SECRET must both be set",
            config_key="MS_CLIENT_ID"
        )
    return Credential(client_id=translator_config.client_id, client_secret=translator_config.client_secret)
