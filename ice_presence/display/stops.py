"""Stop table display."""

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import StopRecord, TripSnapshot, format_time


def get_status_style(stop: StopRecord, is_next: bool = False) -> tuple[str, str]:
    """Get display style and icon for a stop."""
    if stop.is_reached:
        return "green", "✓"
    if is_next:
        return "yellow bold", "→"
    if stop.is_future:
        return "white", "○"
    return "dim", "·"


def build_stops_table(snapshot: TripSnapshot, destination: str | None = None) -> Panel:
    """Build the table of all stops of the trip."""
    table = Table(
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
        expand=True,
    )

    table.add_column("", width=2, justify="center")
    table.add_column("Station", min_width=20)
    table.add_column("Sch Arr", width=8, justify="center")
    table.add_column("Act Arr", width=8, justify="center")
    table.add_column("Status", width=10, justify="center")

    next_stop = next((stop for stop in snapshot.stops if stop.is_future), None)

    for stop in snapshot.stops:
        style, icon = get_status_style(stop, is_next=stop is next_stop)

        name_style = style
        if destination and stop.station_name == destination:
            name_style = f"{style} underline"

        if stop.actual_arrival and stop.scheduled_arrival and stop.actual_arrival > stop.scheduled_arrival:
            act_style = "red"
        else:
            act_style = "green"

        status = stop.position_status.value.capitalize() if stop.position_status else "—"

        table.add_row(
            Text(icon, style=style),
            Text(stop.station_name, style=name_style),
            format_time(stop.scheduled_arrival) if stop.scheduled_arrival else "",
            Text(format_time(stop.actual_arrival), style=act_style) if stop.actual_arrival else "",
            Text(status, style=style),
        )

    return Panel(
        table,
        title=f"[bold]{snapshot.train_type} {snapshot.trip_number}[/]",
        border_style="blue",
    )
