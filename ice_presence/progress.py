"""Trip progress evaluation: has the destination been reached, and what comes next."""

from dataclasses import dataclass

from .errors import DestinationNotFound, NoUpcomingStop
from .models import StopRecord, TripSnapshot


@dataclass(frozen=True)
class Arrived:
    """The train has reached or passed the destination."""
    stop: StopRecord


@dataclass(frozen=True)
class InProgress:
    """The journey continues; ``next_stop`` is the first stop still ahead."""
    next_stop: StopRecord
    destination: StopRecord


EvaluationResult = Arrived | InProgress


def evaluate(snapshot: TripSnapshot, destination_name: str) -> EvaluationResult:
    """
    Classify a snapshot against the chosen destination.

    Returns Arrived once the destination reports any status other than
    "future". A destination without a reported status counts as not yet
    reached. Otherwise the next stop is the first "future" stop in route
    order.

    Raises DestinationNotFound if the destination is not part of the trip,
    NoUpcomingStop if the destination is pending but no stop is "future".
    """
    destination = snapshot.find_stop(destination_name)
    if destination is None:
        raise DestinationNotFound(destination_name)

    if destination.is_reached:
        return Arrived(stop=destination)

    next_stop = next((stop for stop in snapshot.stops if stop.is_future), None)
    if next_stop is None:
        raise NoUpcomingStop(destination_name)

    return InProgress(next_stop=next_stop, destination=destination)


def candidate_destinations(snapshot: TripSnapshot) -> list[str]:
    """Names of the stops not passed yet, in route order."""
    return [stop.station_name for stop in snapshot.stops if stop.is_pending]
