"""Keycloak client-credentials authentication.

Tokens are kept in an explicit TokenCache created once per process and
passed to whatever issues authenticated requests.

Example:
    cache = TokenCache()
    keycloak = KeycloakClientCredentials(config, cache)
    token = await keycloak.get_token()
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from .auth import AuthResolutionError

logger = logging.getLogger(__name__)

# Renew tokens this many seconds before they expire
TOKEN_RENEWAL_MARGIN = 5 * 60


@dataclass
class KeycloakConfig:
    """Keycloak realm and client settings."""
    url: str
    realm: str
    client_id: str
    client_secret: str

    @property
    def token_url(self) -> str:
        return f"{self.url.rstrip('/')}/realms/{self.realm}/protocol/openid-connect/token"

    def missing(self) -> list[str]:
        """Return the names of unset settings."""
        return [
            name
            for name in ("url", "realm", "client_id", "client_secret")
            if not getattr(self, name)
        ]


def validate_config(config: KeycloakConfig) -> bool:
    """Check that every Keycloak setting is present, warning about gaps."""
    missing = config.missing()
    if missing:
        logger.warning("Missing Keycloak settings: %s", ", ".join(missing))
        return False
    return True


@dataclass
class TokenCache:
    """Access token with its absolute expiry time.

    Args:
        clock: Returns the current time in seconds (default: time.time)
        margin: Seconds before expiry at which the token counts as stale
    """
    clock: Callable[[], float] = time.time
    margin: float = TOKEN_RENEWAL_MARGIN
    token: str | None = field(default=None, init=False)
    expires_at: float | None = field(default=None, init=False)

    def get(self) -> str | None:
        """Return the cached token unless it is missing or about to expire."""
        if self.token is None or self.expires_at is None:
            return None
        if self.clock() < self.expires_at - self.margin:
            return self.token
        return None

    def store(self, token: str, expires_in: float) -> None:
        self.token = token
        self.expires_at = self.clock() + expires_in

    def clear(self) -> None:
        self.token = None
        self.expires_at = None

    def is_expiring_soon(self) -> bool:
        return self.get() is None

    def info(self) -> dict[str, Any]:
        """Describe the cached token (for diagnostics)."""
        if self.token is None or self.expires_at is None:
            return {"has_token": False}
        return {
            "has_token": True,
            "expires_at": self.expires_at,
            "expires_in": max(0, int(self.expires_at - self.clock())),
        }


class KeycloakClientCredentials:
    """Obtains access tokens with the OAuth client-credentials grant."""

    def __init__(
        self,
        config: KeycloakConfig,
        cache: TokenCache | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.cache = cache if cache is not None else TokenCache()
        self.timeout = timeout
        self._transport = transport

    async def get_token(self) -> str:
        """Return a valid access token, requesting a new one when needed.

        Raises:
            AuthResolutionError: If Keycloak rejects the request or is unreachable
        """
        cached = self.cache.get()
        if cached is not None:
            return cached

        logger.info("Requesting Keycloak token: %s@%s", self.config.realm, self.config.url)

        form = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.config.token_url, data=form)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._describe_error(exc.response) from exc
        except httpx.HTTPError as exc:
            raise AuthResolutionError(f"Keycloak authentication failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthResolutionError("Keycloak returned a non-JSON token response") from exc

        token = payload.get("access_token")
        if not token:
            raise AuthResolutionError("No access token received from Keycloak")

        expires_in = payload.get("expires_in", 0)
        self.cache.store(token, expires_in)
        logger.info("Keycloak token obtained (expires in %ss)", expires_in)
        return token

    @staticmethod
    def _describe_error(response: httpx.Response) -> AuthResolutionError:
        """Map Keycloak error responses to readable errors."""
        if response.status_code == 401:
            return AuthResolutionError("Invalid Keycloak credentials (client_id/client_secret)")
        if response.status_code == 400:
            try:
                error = response.json().get("error")
            except ValueError:
                error = None
            if error == "invalid_client":
                return AuthResolutionError("Invalid Keycloak client ID")
            if error == "unauthorized_client":
                return AuthResolutionError("Client not authorized for the client credentials grant")
        return AuthResolutionError(f"Keycloak authentication failed: HTTP {response.status_code}")
