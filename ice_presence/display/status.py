"""Single-line trip status echoed to the console on every refresh."""

from rich.text import Text

from ..models import TripSnapshot, format_time
from ..progress import Arrived, EvaluationResult


def build_status_line(snapshot: TripSnapshot, result: EvaluationResult) -> Text:
    """Build a compact status line for the latest evaluation."""
    line = Text()
    line.append(f"🚄 {snapshot.train_type} {snapshot.trip_number}", style="bold")

    if isinstance(result, Arrived):
        line.append(" | ")
        line.append(f"Arrived at {result.stop.station_name}", style="green bold")
    else:
        destination = result.destination
        line.append(f" → {destination.station_name}", style="bold")
        line.append(" | ")
        line.append(f"Next: {result.next_stop.station_name}", style="cyan")

        eta = destination.actual_arrival or destination.scheduled_arrival
        line.append(f" | ETA {format_time(eta)}")

        if destination.actual_arrival and destination.scheduled_arrival:
            diff_mins = (destination.actual_arrival - destination.scheduled_arrival).total_seconds() / 60
            if diff_mins >= 1:
                line.append(f" +{diff_mins:.0f}m", style="red")

    line.append(f" | Updated {snapshot.fetched_at.astimezone().strftime('%H:%M:%S')}", style="dim")
    return line
