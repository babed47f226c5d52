"""Exception types raised while tracking a trip."""


class IcePresenceError(Exception):
    """Base class for every error the tracker reports to the user."""


class FetchError(IcePresenceError):
    """The ICE Portal could not be reached or returned unusable data."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ProgressError(IcePresenceError):
    """A snapshot is inconsistent with the chosen destination."""

    def __init__(self, message: str, destination: str):
        super().__init__(message)
        self.destination = destination


class DestinationNotFound(ProgressError):
    def __init__(self, destination: str):
        super().__init__(f"Destination {destination!r} is not a stop of this trip", destination)


class NoUpcomingStop(ProgressError):
    def __init__(self, destination: str):
        super().__init__(
            f"Trip has no upcoming stop although {destination!r} has not been reached",
            destination,
        )


class DisplayTransportError(IcePresenceError):
    """Talking to the Discord client over IPC failed."""
