"""
Trello API client: async httpx wrapper with query-param auth (?key=...&token=...).

Shared by all Trello tool modules.
"""

import logging

import httpx

from errors import RemoteAPIError, TransportError

logger = logging.getLogger(__name__)

# Trello API base URL
API_BASE = "https://api.trello.com/1"

# Seconds allowed for one Trello call
DEFAULT_TIMEOUT = 30.0


class TrelloClient:
    """Authenticated access to the Trello REST API."""

    def __init__(
        self,
        api_key: str,
        api_token: str,
        base_url: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def __repr__(self) -> str:
        return f"TrelloClient(base_url={self.base_url!r})"

    def _auth_params(self) -> dict:
        return {"key": self._api_key, "token": self._api_token}

    async def call(self, path: str, method: str = "GET", body: dict | None = None) -> dict | list:
        """
        Make an authenticated Trello API request.

        Args:
            path: API path (e.g. "/boards/{id}/lists")
            method: HTTP method (GET, POST, PUT, DELETE)
            body: Form fields, sent url-encoded

        Returns:
            Parsed JSON response.

        Raises:
            RemoteAPIError: Trello answered with a non-2xx status.
            TransportError: The request failed before any answer arrived.
        """
        url = f"{self.base_url}{path}"
        logger.debug("Trello %s %s", method, path)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, params=self._auth_params(), data=body)
        except httpx.RequestError as e:
            # The exception text may hold the full URL, credentials included
            raise TransportError(f"Error connecting to Trello: {type(e).__name__}") from e

        if not resp.is_success:
            raise RemoteAPIError(resp.status_code, resp.reason_phrase, resp.text)

        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()
