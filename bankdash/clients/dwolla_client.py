"""
Dwolla REST API client.

Dwolla speaks HAL+JSON over HTTPS with OAuth client-credentials auth:

  1. POST /token with the application key/secret (HTTP basic auth) to get
     a short-lived bearer token
  2. Call resources with `Authorization: Bearer <token>`

Creating a resource returns 201 with the new resource's URL in the
Location header and an empty body; that URL is what the rest of the
application stores (customer URL, funding source URL, transfer URL).

The bearer token is cached until shortly before it expires. Errors are
raised as DwollaAPIError and left for the calling service action to log.
"""

import logging
import time
from functools import lru_cache
from typing import Any

import httpx

from bankdash.config import settings

logger = logging.getLogger(__name__)


DWOLLA_HOSTS = {
    "sandbox": "https://api-sandbox.dwolla.com",
    "production": "https://api.dwolla.com",
}

DWOLLA_MEDIA_TYPE = "application/vnd.dwolla.v1.hal+json"

# Refresh the bearer token this many seconds before Dwolla expires it
TOKEN_EXPIRY_MARGIN = 60


class DwollaAPIError(Exception):
    """Raised when Dwolla responds with a non-success status."""

    def __init__(self, status_code: int, body: Any, path: str):
        self.status_code = status_code
        self.body = body
        self.path = path
        super().__init__(f"Dwolla {path} failed with {status_code}: {body}")


class DwollaClient:
    """
    Minimal async client for the Dwolla endpoints this application uses.

    Args:
        key / secret: Dwolla application credentials.
        environment: "sandbox" or "production".
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        key: str,
        secret: str,
        environment: str = "sandbox",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = DWOLLA_HOSTS[environment]
        self._key = key
        self._secret = secret
        self._timeout = timeout
        self._transport = transport
        self._access_token: str | None = None
        self._token_expires_at = 0.0

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        response = await client.post(
            "/token",
            auth=(self._key, self._secret),
            data={"grant_type": "client_credentials"},
        )
        if response.status_code != 200:
            raise DwollaAPIError(response.status_code, _safe_json(response), "/token")

        payload = response.json()
        self._access_token = payload["access_token"]
        self._token_expires_at = (
            time.monotonic() + payload.get("expires_in", 3600) - TOKEN_EXPIRY_MARGIN
        )
        logger.debug("Obtained Dwolla access token")
        return self._access_token

    async def post(self, path: str, body: dict[str, Any] | None = None) -> httpx.Response:
        """
        POST a JSON body to a Dwolla resource, e.g. "customers".

        Raises:
            DwollaAPIError: On any non-2xx response.
            httpx.HTTPError: On transport failures.
        """
        async with self._client() as client:
            token = await self._get_access_token(client)
            response = await client.post(
                path,
                json=body or {},
                headers={
                    "Accept": DWOLLA_MEDIA_TYPE,
                    "Content-Type": DWOLLA_MEDIA_TYPE,
                    "Authorization": f"Bearer {token}",
                },
            )

        if response.is_error:
            raise DwollaAPIError(response.status_code, _safe_json(response), path)
        return response


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


@lru_cache
def get_dwolla_client() -> DwollaClient:
    """Return the process-wide Dwolla client."""
    logger.info("Initialized Dwolla client for %s environment", settings.DWOLLA_ENV)
    return DwollaClient(
        key=settings.DWOLLA_KEY,
        secret=settings.DWOLLA_SECRET,
        environment=settings.DWOLLA_ENV,
        timeout=settings.DWOLLA_TIMEOUT,
    )
