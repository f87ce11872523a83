"""GraphQL executor for running documents against a GraphQL endpoint.

Handles HTTP communication, error handling, and response parsing.
"""

from typing import Any

import httpx

from .auth import Auth, NoAuth


class GraphQLError(Exception):
    """Exception raised for GraphQL errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


class GraphQLExecutor:
    """Executes GraphQL documents against an endpoint.

    Supports pluggable authentication via the Auth protocol.

    Examples:
        executor = GraphQLExecutor(url, auth=BearerAuth(token))
        executor = GraphQLExecutor(url, auth=credentials.auth)

        async with GraphQLExecutor(url) as executor:
            data = await executor.execute("{ __typename }")
    """

    def __init__(
        self,
        url: str,
        auth: Auth | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the executor.

        Args:
            url: GraphQL endpoint URL
            auth: Authentication handler (implements Auth protocol)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.timeout = timeout
        self._auth = auth if auth is not None else NoAuth()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GraphQLExecutor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            # Build headers from auth handler
            headers = {"Content-Type": "application/json"}
            headers.update(self._auth.get_headers())

            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def execute(self, query: str) -> dict[str, Any]:
        """Execute a raw GraphQL document.

        Args:
            query: GraphQL document

        Returns:
            The 'data' portion of the response

        Raises:
            GraphQLError: If the response contains errors or is not a JSON object
            httpx.HTTPError: If the request fails or returns an error status
        """
        client = await self._get_client()

        response = await client.post(self.url, json={"query": query})
        response.raise_for_status()

        try:
            result = response.json()
        except ValueError as exc:
            raise GraphQLError(f"Response from {self.url} is not valid JSON", []) from exc

        if not isinstance(result, dict):
            raise GraphQLError(f"Response from {self.url} is not a JSON object", [])

        if result.get("errors"):
            error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
            raise GraphQLError(f"GraphQL errors: {error_messages}", result["errors"])

        return result.get("data") or {}
