"""HTTP transport used by the gateway client."""

import logging
from typing import Any, Mapping, Optional

import httpx

from botrest.exceptions import TransportError

logger = logging.getLogger(__name__)


class HTTPTransport:
    """Thin wrapper over an httpx.AsyncClient that normalizes transport failures."""

    def __init__(
        self,
        timeout: float = 30,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize HTTP transport.

        Args:
            timeout: Request timeout in seconds
            client: Existing httpx client to send through (not closed by us)
            transport: Custom httpx transport for a client we create
        """
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self):
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Full URL
            headers: Request headers
            content: Raw body bytes
            params: Query parameters

        Returns:
            httpx.Response, whatever its status

        Raises:
            TransportError: If no response was received
        """
        try:
            return await self.client.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                content=content or None,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request {method} {url} timed out")
            raise TransportError(method, url, e) from e
        except httpx.RequestError as e:
            logger.error(f"Request {method} {url} failed: {e}")
            raise TransportError(method, url, e) from e
