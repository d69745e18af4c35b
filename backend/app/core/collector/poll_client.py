############################################################
#
# etlive - ET Live Data Server
#
# poll_client.py: HTTP client for node latest-measurement endpoints
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Client for the latest-measurement endpoint exposed by each node."""

import asyncio
from typing import Optional

import httpx
from pydantic import ValidationError

from backend.app.core.collector.exceptions import (
    PollConnectionError,
    PollDecodeError,
    PollHTTPError,
    PollTimeoutError,
)
from backend.app.core.collector.models import LastDataResponse, Measurement
from backend.app.logging_config import get_logger

logger = get_logger(__name__)


class PollClient:
    """
    HTTP client used by the scheduler to fetch node measurements.

    Each node serves its latest data point at its own URL as
    ``{"data": {...}}``. One attempt is made per call; the whole request,
    body included, must complete within ``timeout`` seconds.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch(self, endpoint: str) -> Measurement:
        """
        Fetch and decode the latest measurement from a node.

        Args:
            endpoint: Full URL of the node's latest-data endpoint

        Returns:
            Decoded Measurement

        Raises:
            PollTimeoutError: no complete response within the timeout
            PollConnectionError: the node could not be reached
            PollHTTPError: the node answered with a non-200 status
            PollDecodeError: the body is not a valid measurement payload
        """
        try:
            response = await asyncio.wait_for(
                self._get(endpoint), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise PollTimeoutError(endpoint, f"no response within {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise PollConnectionError(endpoint, str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise PollHTTPError(endpoint, response.status_code)

        return self._parse_response(endpoint, response.content)

    async def _get(self, endpoint: str) -> httpx.Response:
        client = await self._get_client()
        return await client.get(endpoint)

    def _parse_response(self, endpoint: str, body: bytes) -> Measurement:
        """Decode a ``{"data": Measurement}`` body."""
        try:
            return LastDataResponse.model_validate_json(body).data
        except ValidationError as e:
            raise PollDecodeError(
                endpoint, f"{e.error_count()} validation error(s)"
            ) from e
