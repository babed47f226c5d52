"""Error and arrival display panels."""

from rich.panel import Panel
from rich.text import Text

from ..models import StopRecord


def build_error_panel(error: str) -> Panel:
    """Build an error display panel."""
    return Panel(
        Text(f"Error: {error}", style="bold red"),
        title="[bold red]Error[/]",
        border_style="red"
    )


def build_no_destination_panel() -> Panel:
    """Build the panel shown when every stop has already been passed."""
    content = Text()
    content.append("No upcoming stops on this trip.\n\n", style="bold yellow")
    content.append("This could mean:\n", style="white")
    content.append("• The train has completed its journey\n", style="dim")
    content.append("• The portal has not published the stop list yet\n", style="dim")

    return Panel(
        content,
        title="[bold yellow]Nothing to Track[/]",
        border_style="yellow"
    )


def build_arrival_panel(stop: StopRecord) -> Panel:
    """Build the panel shown once the destination is reached."""
    return Panel(
        Text(f"Welcome in {stop.station_name}", style="bold green"),
        border_style="green"
    )
