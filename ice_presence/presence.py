"""Discord Rich Presence: building presence updates and publishing them over IPC."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Protocol, TypeVar

from pypresence import Presence
from pypresence.exceptions import PyPresenceException

from .config import DISCORD_CLIENT_ID, WATCH_URL
from .errors import DisplayTransportError
from .models import TripSnapshot
from .progress import InProgress
from .series import translate_series

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PresenceUpdate:
    """Everything shown in one presence refresh."""
    details: str
    state: str
    image_key: str
    end: int | None = None  # epoch seconds
    buttons: tuple[tuple[str, str], ...] = ()


def build_presence_update(
    result: InProgress,
    snapshot: TripSnapshot,
    series: str | None,
    project_url: str | None = None,
) -> PresenceUpdate:
    """Format the presence for a trip that is still under way."""
    destination = result.destination
    arrival = destination.actual_arrival

    buttons = [
        ("Watch", WATCH_URL.format(train_type=snapshot.train_type, trip_number=snapshot.trip_number)),
    ]
    if project_url:
        buttons.append(("Try now", project_url))

    return PresenceUpdate(
        details=f"Riding {snapshot.train_type} {snapshot.trip_number} to {destination.station_name}",
        state=f"Next stop: {result.next_stop.station_name}",
        image_key=translate_series(series),
        end=int(arrival.timestamp()) if arrival else None,
        buttons=tuple(buttons),
    )


class PresenceDisplay(Protocol):
    """Surface the trip status is broadcast to."""

    async def connect(self) -> None: ...

    async def publish(self, update: PresenceUpdate) -> None: ...

    async def clear(self) -> None: ...

    async def close(self) -> None: ...


class DiscordPresence:
    """
    PresenceDisplay backed by the local Discord client.

    pypresence drives its own event loop and blocks while talking to the
    IPC socket, so every call runs on one dedicated worker thread.
    """

    def __init__(self, client_id: str = DISCORD_CLIENT_ID):
        self.client_id = client_id
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="discord-ipc")
        self._client: Presence | None = None
        self._closed = False

    async def _call(self, action: str, fn: Callable[[], T]) -> T:
        if self._closed:
            raise DisplayTransportError(f"Cannot {action}: Discord connection is closed")
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, fn)
        except (PyPresenceException, OSError) as e:
            raise DisplayTransportError(f"Error while trying to {action}: {e}") from e

    def _require_client(self) -> Presence:
        if self._client is None:
            raise DisplayTransportError("Discord client is not connected")
        return self._client

    async def connect(self) -> None:
        def _connect() -> None:
            # Created on the worker thread so pypresence binds its loop there
            client = Presence(self.client_id)
            client.connect()
            self._client = client

        await self._call("connect to Discord", _connect)
        logger.info("Connected to Discord IPC as client %s", self.client_id)

    async def publish(self, update: PresenceUpdate) -> None:
        def _publish() -> None:
            self._require_client().update(
                details=update.details,
                state=update.state,
                end=update.end,
                large_image=update.image_key,
                buttons=[{"label": label, "url": url} for label, url in update.buttons] or None,
            )

        await self._call("set activity", _publish)
        logger.debug("Published presence: %s / %s", update.details, update.state)

    async def clear(self) -> None:
        if self._client is None:
            return
        await self._call("clear activity", lambda: self._require_client().clear())

    async def close(self) -> None:
        if self._closed:
            return
        try:
            if self._client is not None:
                await self._call("close Discord socket", self._require_client().close)
        finally:
            self._closed = True
            self._client = None
            self._executor.shutdown(wait=False)
            logger.info("Closed Discord IPC connection")
