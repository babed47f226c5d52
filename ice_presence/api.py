"""API communication and retry logic for the on-board ICE Portal."""

import asyncio
import logging
from typing import Any

import httpx

from .config import API_BASE, REQUEST_TIMEOUT, RetryPolicy
from .errors import FetchError
from .models import RouteStatus, TripSnapshot, parse_route_status, parse_trip_snapshot

logger = logging.getLogger(__name__)


class IcePortalClient:
    """Fetches trip and vehicle status from the ICE Portal with retry logic."""

    def __init__(
        self,
        base_url: str = API_BASE,
        retry: RetryPolicy | None = None,
        timeout: float = REQUEST_TIMEOUT,
        http: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retry = retry or RetryPolicy()
        # An injected client belongs to the caller and is not closed here
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "IcePortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def fetch_trip_snapshot(self) -> TripSnapshot:
        """Fetch the current stop list of the trip."""
        payload = await self._get_json("/tripInfo/trip")
        snapshot = parse_trip_snapshot(payload)
        logger.debug(
            "Fetched trip %s %s with %d stops",
            snapshot.train_type, snapshot.trip_number, len(snapshot.stops),
        )
        return snapshot

    async def fetch_route_status(self) -> RouteStatus:
        """Fetch the vehicle series of the train."""
        payload = await self._get_json("/status")
        status = parse_route_status(payload)
        logger.debug("Fetched status for series %s", status.series)
        return status

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        attempts = self.retry.attempts
        error_msg = ""

        for attempt in range(attempts):
            if attempt:
                delay = self.retry.delay_for(attempt - 1)
                logger.warning("%s, retrying in %.0fs (%d/%d)", error_msg, delay, attempt + 1, attempts)
                await asyncio.sleep(delay)

            try:
                response = await self._http.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                error_msg = f"HTTP {e.response.status_code} from {url}"
                continue
            except httpx.HTTPError as e:
                error_msg = f"{type(e).__name__} while fetching {url}: {e}"
                continue

            try:
                return response.json()
            except ValueError as e:
                raise FetchError(f"Invalid JSON from {url}: {e}") from e

        raise FetchError(error_msg, retryable=True)
