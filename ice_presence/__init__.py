"""ICE trip status as Discord Rich Presence."""

__version__ = "0.1.0"
