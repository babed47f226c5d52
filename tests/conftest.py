"""Shared test fixtures and helpers for ice-presence tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
from rich.console import Console

from ice_presence.errors import DisplayTransportError
from ice_presence.models import PositionStatus, StopRecord, TripSnapshot


# =============================================================================
# Constants
# =============================================================================


# A fixed "now" for deterministic time-based tests
FIXED_NOW = datetime(2025, 3, 15, 14, 30, 0, tzinfo=timezone.utc)

FUTURE = PositionStatus.FUTURE
ARRIVED = PositionStatus.ARRIVED
DEPARTED = PositionStatus.DEPARTED
PASSED = PositionStatus.PASSED


# =============================================================================
# Model helpers
# =============================================================================


def make_stop(name="Test Hbf", status=None, sch_arr=None, arr=None, eva="8000000"):
    """Build a StopRecord with sensible defaults."""
    return StopRecord(
        station_name=name,
        scheduled_arrival=sch_arr,
        actual_arrival=arr,
        position_status=status,
        eva_number=eva,
    )


def make_snapshot(*stops, train_type="ICE", trip_number="1234"):
    """Build a TripSnapshot from StopRecords or (name, status) pairs."""
    records = tuple(
        stop if isinstance(stop, StopRecord) else make_stop(*stop)
        for stop in stops
    )
    return TripSnapshot(
        train_type=train_type,
        trip_number=trip_number,
        stops=records,
        fetched_at=FIXED_NOW,
    )


def journey_at_phase(phase: str) -> TripSnapshot:
    """
    Build ICE 1234 Frankfurt -> Köln at different journey phases.

    Phases:
        "boarding" -- nothing reported yet except Frankfurt
        "mid"      -- Frankfurt, Flughafen departed, en route to Montabaur
        "approach" -- everything but Köln departed
        "arrived"  -- train standing in Köln
    """
    base = FIXED_NOW - timedelta(hours=1)
    times = {
        "FFM": base,
        "FRA": base + timedelta(minutes=12),
        "MTB": base + timedelta(minutes=40),
        "SIE": base + timedelta(minutes=60),
        "KOE": base + timedelta(minutes=75),
    }
    names = {
        "FFM": "Frankfurt(Main)Hbf",
        "FRA": "Frankfurt(M) Flughafen Fernbf",
        "MTB": "Montabaur",
        "SIE": "Siegburg/Bonn",
        "KOE": "Köln Hbf",
    }
    statuses = {
        "boarding": [ARRIVED, None, None, None, None],
        "mid": [DEPARTED, DEPARTED, FUTURE, FUTURE, FUTURE],
        "approach": [DEPARTED, DEPARTED, PASSED, DEPARTED, FUTURE],
        "arrived": [DEPARTED, DEPARTED, PASSED, DEPARTED, ARRIVED],
    }
    if phase not in statuses:
        raise ValueError(f"Unknown phase: {phase}")

    stops = []
    for code, status in zip(names, statuses[phase]):
        arr = times[code] + timedelta(minutes=4) if status is not None else None
        stops.append(make_stop(names[code], status, sch_arr=times[code], arr=arr, eva=code))
    return make_snapshot(*stops)


# =============================================================================
# Payload helpers
# =============================================================================


def ts_ms(dt: datetime) -> int:
    """Convert datetime to Unix timestamp in milliseconds (API format)."""
    return int(dt.timestamp() * 1000)


def make_stop_payload(name="Test Hbf", status=None, sch_arr=None, arr=None, eva="8000000"):
    """Build one entry of trip.stops matching the ICE Portal shape."""
    return {
        "station": {"evaNr": eva, "name": name, "code": None},
        "timetable": {
            "scheduledArrivalTime": sch_arr,
            "actualArrivalTime": arr,
            "showActualArrivalTime": arr is not None,
            "scheduledDepartureTime": None,
            "actualDepartureTime": None,
        },
        "track": {"scheduled": "7", "actual": "7"},
        "info": {"status": 0, "passed": status not in (None, "future"), "positionStatus": status},
        "delayReasons": None,
    }


def make_trip_payload(stops=None, train_type="ICE", vzn="1234"):
    """Build a /tripInfo/trip response."""
    return {
        "trip": {
            "tripDate": "2025-03-15",
            "trainType": train_type,
            "vzn": vzn,
            "actualPosition": 0,
            "distanceFromLastStop": 0,
            "totalDistance": 177000,
            "stops": stops if stops is not None else [],
        },
        "connection": None,
    }


def make_status_payload(series="407", tzn="Tz4710"):
    """Build a /status response."""
    return {
        "connection": True,
        "serviceLevel": "AVAILABLE_SERVICE",
        "speed": 243,
        "trainType": "ICE",
        "tzn": tzn,
        "series": series,
    }


def make_http_client(handler):
    """httpx.AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def render_to_text(renderable, width=120) -> str:
    """Capture a Rich renderable as plain text for assertion."""
    console = Console(record=True, width=width, force_terminal=False)
    console.print(renderable)
    return console.export_text()


# =============================================================================
# Collaborator fakes
# =============================================================================


class FakeDisplay:
    """PresenceDisplay that records every call."""

    def __init__(self, fail_on=None, publish_delay=0.0):
        self.calls = []
        self.published = []
        self.fail_on = fail_on
        self.publish_delay = publish_delay

    def _record(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise DisplayTransportError(f"{name} failed")

    async def connect(self):
        self._record("connect")

    async def publish(self, update):
        if self.publish_delay:
            await asyncio.sleep(self.publish_delay)
        self._record("publish")
        self.published.append(update)

    async def clear(self):
        self._record("clear")

    async def close(self):
        self._record("close")


class FakeSource:
    """TripSource that hands out the given snapshots, then blocks forever.

    An exception instance in ``items`` is raised instead of returned.
    """

    def __init__(self, items):
        self.items = list(items)
        self.fetches = 0

    async def fetch_trip_snapshot(self):
        self.fetches += 1
        if not self.items:
            await asyncio.Event().wait()
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item
