"""Async client for the media library's sync endpoint."""

import logging

import httpx

from songwatch.errors import RemoteRejection, SerializationFailure, TransportFailure
from songwatch.schemas.sync import RequestPayload

logger = logging.getLogger(__name__)


class LibraryClient:
    """Async HTTP client that delivers sync payloads to the library.

    All three request kinds go to the same URL; the verb selects the action.
    Each payload is attempted once. There is no retry.

    Usage::

        async with LibraryClient(base_url) as client:
            await client.send(payload)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = base_url
        self._client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LibraryClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def send(self, payload: RequestPayload) -> httpx.Response:
        """Send a payload with its HTTP verb.

        Returns:
            The HTTP 200 response.

        Raises:
            SerializationFailure: If the body cannot be encoded.
            TransportFailure: If the request could not be sent.
            RemoteRejection: If the library answered with any other status.
        """
        try:
            body = payload.to_json()
        except ValueError as exc:
            raise SerializationFailure(f"Could not encode {payload.verb} body: {exc}") from exc

        try:
            response = await self._client.request(payload.verb.value, self._url, content=body)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportFailure(f"{payload.verb} {self._url} failed: {exc}") from exc

        if response.status_code != 200:
            raise RemoteRejection(response.status_code, response.text.strip())

        logger.debug("%s %s -> %d", payload.verb, self._url, response.status_code)
        return response
