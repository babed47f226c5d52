"""Turning operator interrupts into a cancellation event for the poll loop."""

import asyncio
import logging
import signal
from typing import Callable

logger = logging.getLogger(__name__)

INTERRUPT_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)) if sig is not None
)


def install_interrupt_handler(
    event: asyncio.Event,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Callable[[], None]:
    """
    Set ``event`` when the process receives SIGINT or SIGTERM.

    Returns a callable that restores the previous handlers.
    """
    loop = loop or asyncio.get_running_loop()

    def _notify() -> None:
        if not event.is_set():
            logger.debug("Interrupt received, cancelling")
            event.set()

    try:
        for sig in INTERRUPT_SIGNALS:
            loop.add_signal_handler(sig, _notify)
    except NotImplementedError:
        # Windows event loops have no add_signal_handler
        previous = {}
        for sig in INTERRUPT_SIGNALS:
            previous[sig] = signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(_notify))

        def _restore_signal() -> None:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        return _restore_signal

    def _restore_loop() -> None:
        for sig in INTERRUPT_SIGNALS:
            loop.remove_signal_handler(sig)

    return _restore_loop
