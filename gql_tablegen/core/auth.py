"""Authentication handlers for GraphQL requests.

Each handler stands for one way of authenticating against the API and
knows every header that method sends, including the optional tenant
header. Credentials resolution picks one handler; the executor only
calls get_headers().
"""

from typing import Dict, Optional, Protocol, runtime_checkable

ORGANIZATION_HEADER = "X-Organization-Id"


class AuthResolutionError(Exception):
    """Raised when credentials could not be acquired."""


@runtime_checkable
class Auth(Protocol):
    """Protocol for authentication handlers.

    Example:
        class SessionAuth:
            def __init__(self, cookie: str):
                self.cookie = cookie

            def get_headers(self) -> dict[str, str]:
                return {"Cookie": f"session={self.cookie}"}
    """

    method: str

    def get_headers(self) -> Dict[str, str]:
        """Return headers to include in requests."""
        ...


def _organization_headers(organization_id: Optional[str]) -> Dict[str, str]:
    return {ORGANIZATION_HEADER: organization_id} if organization_id else {}


class BearerAuth:
    """Bearer token, either a static API token or one issued by Keycloak.

    Args:
        token: The bearer token
        organization_id: Optional tenant sent as X-Organization-Id
        method: Label used in logs ("token" or "keycloak")
    """

    def __init__(self, token: str, organization_id: Optional[str] = None, method: str = "token"):
        self.token = token
        self.organization_id = organization_id
        self.method = method

    def get_headers(self) -> Dict[str, str]:
        headers = _organization_headers(self.organization_id)
        headers["Authorization"] = f"Bearer {self.token}"
        return headers


class ApiKeyAuth:
    """API key, optionally paired with a secret.

    Example:
        auth = ApiKeyAuth("key-123", api_secret="s3cret", organization_id="org-1")
        # X-API-Key, X-API-Secret and X-Organization-Id
    """

    method = "api_key"

    def __init__(
        self,
        api_key: str,
        api_secret: Optional[str] = None,
        organization_id: Optional[str] = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.organization_id = organization_id

    def get_headers(self) -> Dict[str, str]:
        headers = _organization_headers(self.organization_id)
        headers["X-API-Key"] = self.api_key
        if self.api_secret:
            headers["X-API-Secret"] = self.api_secret
        return headers


class NoAuth:
    """No credentials; only the tenant header, if any."""

    method = "none"

    def __init__(self, organization_id: Optional[str] = None):
        self.organization_id = organization_id

    def get_headers(self) -> Dict[str, str]:
        return _organization_headers(self.organization_id)
