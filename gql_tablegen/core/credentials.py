"""Resolve the endpoint URL and auth handler from settings.

Authentication methods are tried in a fixed order:

1. API_TOKEN: sent as a bearer token
2. API_KEY (and optional API_SECRET): sent as X-API-Key / X-API-Secret
3. Keycloak client credentials: a token is requested and cached

A Keycloak failure is logged and the request proceeds without auth.
X-Organization-Id is sent with every method when configured.
"""

import logging
from dataclasses import dataclass, field

import httpx

from ..settings import Settings
from .auth import ApiKeyAuth, Auth, AuthResolutionError, BearerAuth, NoAuth
from .keycloak import KeycloakClientCredentials, KeycloakConfig, TokenCache, validate_config

logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    """Endpoint URL and the auth handler for every request."""
    url: str
    auth: Auth = field(default_factory=NoAuth)

    @property
    def method(self) -> str:
        return self.auth.method

    @property
    def headers(self) -> dict[str, str]:
        return self.auth.get_headers()


def keycloak_config(settings: Settings) -> KeycloakConfig:
    return KeycloakConfig(
        url=settings.keycloak_url,
        realm=settings.keycloak_realm,
        client_id=settings.keycloak_client_id,
        client_secret=settings.keycloak_client_secret,
    )


async def resolve_credentials(
    settings: Settings,
    token_cache: TokenCache | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Credentials:
    """Build the credentials for the configured GraphQL API.

    Args:
        settings: Loaded settings
        token_cache: Process-wide Keycloak token cache
        transport: Optional httpx transport for the token request (used by tests)
    """
    credentials = Credentials(
        url=settings.graphql_api_url,
        auth=await _resolve_auth(settings, token_cache, transport),
    )
    logger.debug("Using %s authentication for %s", credentials.method, credentials.url)
    return credentials


async def _resolve_auth(
    settings: Settings,
    token_cache: TokenCache | None,
    transport: httpx.AsyncBaseTransport | None,
) -> Auth:
    organization_id = settings.organization_id

    if settings.api_token:
        return BearerAuth(settings.api_token, organization_id)

    if settings.api_key:
        return ApiKeyAuth(settings.api_key, settings.api_secret, organization_id)

    config = keycloak_config(settings)
    if config.client_id and config.client_secret and validate_config(config):
        keycloak = KeycloakClientCredentials(
            config,
            token_cache,
            timeout=settings.request_timeout,
            transport=transport,
        )
        try:
            token = await keycloak.get_token()
        except AuthResolutionError as exc:
            logger.warning("Failed to get Keycloak token, proceeding without auth: %s", exc)
        else:
            return BearerAuth(token, organization_id, method="keycloak")

    return NoAuth(organization_id)
