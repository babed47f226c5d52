"""Trip data models and parsing of ICE Portal payloads."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import FetchError


def _now() -> datetime:
    """Current UTC time. Extracted for test patching."""
    return datetime.now(timezone.utc)


class PositionStatus(str, Enum):
    """Where the train is relative to a stop, as reported by the portal."""
    FUTURE = "future"
    ARRIVED = "arrived"
    DEPARTED = "departed"
    PASSED = "passed"


@dataclass(frozen=True)
class StopRecord:
    """One scheduled stop of the trip.

    ``position_status`` is ``None`` while the portal has not reported a
    status for the stop yet.
    """
    station_name: str
    scheduled_arrival: datetime | None = None
    actual_arrival: datetime | None = None
    position_status: PositionStatus | None = None
    eva_number: str | None = None

    @property
    def is_future(self) -> bool:
        return self.position_status is PositionStatus.FUTURE

    @property
    def is_pending(self) -> bool:
        """Not reached yet, or not reported at all."""
        return self.position_status is None or self.is_future

    @property
    def is_reached(self) -> bool:
        return not self.is_pending


@dataclass(frozen=True)
class TripSnapshot:
    """All stops of the trip, in route order, as fetched at one point in time."""
    train_type: str
    trip_number: str
    stops: tuple[StopRecord, ...]
    fetched_at: datetime = field(default_factory=_now, compare=False)

    def find_stop(self, station_name: str) -> StopRecord | None:
        for stop in self.stops:
            if stop.station_name == station_name:
                return stop
        return None


@dataclass(frozen=True)
class RouteStatus:
    """Vehicle information from the portal's status endpoint."""
    series: str
    tzn: str | None = None


def parse_time(time_val: str | int | float | None) -> datetime | None:
    """Parse time value - handles Unix timestamps (ms) and ISO strings."""
    if time_val is None or isinstance(time_val, bool):
        return None

    try:
        # The portal reports epoch milliseconds
        if isinstance(time_val, (int, float)):
            return datetime.fromtimestamp(time_val / 1000, tz=timezone.utc)

        if isinstance(time_val, str) and time_val.isdigit():
            return datetime.fromtimestamp(int(time_val) / 1000, tz=timezone.utc)

        if isinstance(time_val, str):
            dt = datetime.fromisoformat(time_val.replace("Z", "+00:00"))
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt

        return None
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def format_time(dt: datetime | None) -> str:
    """Format datetime for display in local time."""
    if not dt:
        return "—"
    return dt.astimezone().strftime("%H:%M")


def parse_position_status(value: Any) -> PositionStatus | None:
    if value is None or value == "":
        return None
    try:
        return PositionStatus(str(value).lower())
    except ValueError:
        raise FetchError(f"Unknown position status {value!r}") from None


def _block(payload: dict[str, Any], key: str) -> dict[str, Any]:
    """A nested object of a stop entry; absent or null counts as empty."""
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise FetchError(f"Stop has malformed {key!r} block: {value!r}")
    return value


def parse_stop(payload: Any) -> StopRecord:
    """Build a StopRecord from one entry of ``trip.stops``."""
    if not isinstance(payload, dict):
        raise FetchError(f"Malformed stop entry in trip info: {payload!r}")

    station = _block(payload, "station")
    name = station.get("name")
    if not name or not isinstance(name, str):
        raise FetchError("Stop without station name in trip info")

    timetable = _block(payload, "timetable")
    info = _block(payload, "info")

    return StopRecord(
        station_name=name,
        scheduled_arrival=parse_time(timetable.get("scheduledArrivalTime")),
        actual_arrival=parse_time(timetable.get("actualArrivalTime")),
        position_status=parse_position_status(info.get("positionStatus")),
        eva_number=station.get("evaNr"),
    )


def parse_trip_snapshot(payload: Any) -> TripSnapshot:
    """Build a TripSnapshot from the ``/tripInfo/trip`` response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("trip"), dict):
        raise FetchError("Trip info response has no trip")

    trip = payload["trip"]
    raw_stops = trip.get("stops")
    if not isinstance(raw_stops, list):
        raise FetchError("Trip info response has no stops")

    stops = tuple(parse_stop(stop) for stop in raw_stops)

    names = [stop.station_name for stop in stops]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise FetchError(f"Trip lists stations more than once: {', '.join(duplicates)}")

    return TripSnapshot(
        train_type=str(trip.get("trainType") or ""),
        trip_number=str(trip.get("vzn") or ""),
        stops=stops,
    )


def parse_route_status(payload: Any) -> RouteStatus:
    """Build a RouteStatus from the ``/status`` response."""
    if not isinstance(payload, dict) or not payload.get("series"):
        raise FetchError("Status response has no series")

    return RouteStatus(series=str(payload["series"]), tzn=payload.get("tzn") or None)
