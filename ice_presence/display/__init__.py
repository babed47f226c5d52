"""Display rendering components for ice-presence."""

from .status import build_status_line
from .stops import build_stops_table, get_status_style
from .errors import build_error_panel, build_no_destination_panel, build_arrival_panel

__all__ = [
    "build_status_line",
    "build_stops_table",
    "get_status_style",
    "build_error_panel",
    "build_no_destination_panel",
    "build_arrival_panel",
]
