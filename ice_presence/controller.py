"""Poll loop: refresh the trip periodically and keep the presence up to date."""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Callable, Protocol

from .config import REFRESH_INTERVAL
from .errors import FetchError
from .models import TripSnapshot
from .presence import PresenceDisplay, build_presence_update
from .progress import Arrived, EvaluationResult, evaluate

logger = logging.getLogger(__name__)


class TripSource(Protocol):
    async def fetch_trip_snapshot(self) -> TripSnapshot: ...


class LoopState(Enum):
    RUNNING = "running"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"
    FAILED = "failed"


UpdateCallback = Callable[[TripSnapshot, EvaluationResult], None]


class TripController:
    """
    Drives one tracking run until the destination is reached or the run is cancelled.

    A background task fetches a snapshot every ``refresh_interval`` seconds
    and queues it. The loop takes one event per iteration, either the oldest
    queued snapshot or the cancellation, evaluates the snapshot and publishes
    the result. The display is cleared and closed on every way out of ``run``.
    """

    def __init__(
        self,
        source: TripSource,
        display: PresenceDisplay,
        destination: str,
        series: str | None,
        refresh_interval: float = REFRESH_INTERVAL,
        project_url: str | None = None,
        on_update: UpdateCallback | None = None,
        on_connected: Callable[[], None] | None = None,
        evaluator: Callable[[TripSnapshot, str], EvaluationResult] = evaluate,
    ):
        self.source = source
        self.display = display
        self.destination = destination
        self.series = series
        self.refresh_interval = refresh_interval
        self.project_url = project_url
        self.on_update = on_update
        self.on_connected = on_connected
        self.evaluator = evaluator
        self.state: LoopState | None = None
        self.last_result: EvaluationResult | None = None

    async def run(self, cancelled: asyncio.Event) -> LoopState:
        """Run until arrival or cancellation and return the terminal state."""
        queue: asyncio.Queue[TripSnapshot | FetchError] = asyncio.Queue()
        poller: asyncio.Task | None = None

        try:
            await self.display.connect()
            self.state = LoopState.RUNNING
            if self.on_connected is not None:
                self.on_connected()
            poller = asyncio.create_task(self._poll(queue), name="trip-poller")
            self.state = await self._loop(queue, cancelled)
            return self.state
        except Exception:
            self.state = LoopState.FAILED
            raise
        finally:
            if poller is not None:
                poller.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await poller
            try:
                await self._release()
            except Exception:
                self.state = LoopState.FAILED
                raise

    async def _release(self) -> None:
        try:
            await self.display.clear()
        finally:
            await self.display.close()

    async def _poll(self, queue: asyncio.Queue) -> None:
        while True:
            try:
                snapshot = await self.source.fetch_trip_snapshot()
            except FetchError as e:
                logger.error("Fetching trip info failed: %s", e)
                queue.put_nowait(e)
                return
            except Exception as e:
                logger.exception("Fetching trip info failed unexpectedly")
                error = FetchError(f"Fetching trip info failed: {type(e).__name__}: {e}")
                error.__cause__ = e
                queue.put_nowait(error)
                return
            queue.put_nowait(snapshot)
            await asyncio.sleep(self.refresh_interval)

    async def _next_event(
        self, queue: asyncio.Queue, cancelled: asyncio.Event
    ) -> TripSnapshot | FetchError | None:
        """Oldest queued item, or None once cancellation is requested."""
        if cancelled.is_set():
            return None
        if not queue.empty():
            return queue.get_nowait()

        getter = asyncio.ensure_future(queue.get())
        waiter = asyncio.ensure_future(cancelled.wait())
        try:
            await asyncio.wait({getter, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (getter, waiter):
                task.cancel()

        if cancelled.is_set():
            return None
        return getter.result()

    async def _loop(self, queue: asyncio.Queue, cancelled: asyncio.Event) -> LoopState:
        while True:
            item = await self._next_event(queue, cancelled)
            if item is None:
                logger.info("Tracking cancelled")
                return LoopState.CANCELLED
            if isinstance(item, FetchError):
                raise item

            result = self.evaluator(item, self.destination)
            self.last_result = result

            if isinstance(result, Arrived):
                logger.info("Arrived at %s", result.stop.station_name)
                return LoopState.ARRIVED

            update = build_presence_update(result, item, self.series, self.project_url)
            await self.display.publish(update)
            if self.on_update is not None:
                self.on_update(item, result)
