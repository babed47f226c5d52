#!/usr/bin/env python3
"""
ice-presence — ICE trip status as Discord Rich Presence

Reads the on-board ICE Portal (https://iceportal.de) and keeps a Discord
Rich Presence up to date until you arrive at your stop.

Usage:
    ice-presence                         # Pick your stop interactively
    ice-presence --to "Köln Hbf"         # Leave the train in Cologne
    ice-presence --once                  # Show the trip once and exit
    ice-presence -r 60                   # Refresh every minute
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt

from .api import IcePortalClient
from .config import Config, RetryPolicy, REFRESH_INTERVAL, MAX_RETRIES, RETRY_DELAY, env_defaults
from .controller import LoopState, TripController
from .display import (
    build_arrival_panel, build_error_panel, build_no_destination_panel,
    build_status_line, build_stops_table,
)
from .errors import IcePresenceError
from .models import TripSnapshot
from .presence import DiscordPresence
from .progress import Arrived, EvaluationResult, candidate_destinations, evaluate
from .signals import install_interrupt_handler

logger = logging.getLogger(__name__)


def choose_destination(console: Console, candidates: list[str]) -> str:
    """Interactive prompt to select the stop where the passenger leaves the train."""
    console.print("\n[bold yellow]At which station will you leave the train?[/]\n")

    for i, name in enumerate(candidates, 1):
        console.print(f"  {i}. {name}")

    console.print()

    while True:
        choice = Prompt.ask(
            "Select station",
            default=str(len(candidates)),
            console=console,
        )

        # Handle numeric choice
        if choice.isdigit():
            idx = int(choice) - 1
            if 0 <= idx < len(candidates):
                return candidates[idx]
        # Handle station name, case-insensitive
        else:
            for name in candidates:
                if name.casefold() == choice.strip().casefold():
                    return name

        console.print("[red]Invalid selection. Try again.[/]")


def resolve_destination(console: Console, snapshot: TripSnapshot, requested: str | None) -> str | None:
    """Destination from --to, or from the interactive prompt. None if nothing is left to choose."""
    candidates = candidate_destinations(snapshot)
    if not candidates:
        return None

    if requested is None:
        return choose_destination(console, candidates)

    for name in candidates:
        if name.casefold() == requested.casefold():
            return name

    console.print(f"[yellow]{requested} is not an upcoming stop of this trip.[/]")
    return choose_destination(console, candidates)


def setup_logging(console: Console, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def track(config: Config, console: Console) -> int:
    """Run one tracking session. Returns the process exit code."""
    async with IcePortalClient(base_url=config.api_base, retry=config.retry) as portal:
        console.print("[dim]Fetching trip info...[/]")
        snapshot = await portal.fetch_trip_snapshot()
        status = await portal.fetch_route_status()

        if config.once:
            console.print(build_stops_table(snapshot, config.destination))
            if config.destination:
                console.print(build_status_line(snapshot, evaluate(snapshot, config.destination)))
            return 0

        destination = resolve_destination(console, snapshot, config.destination)
        if destination is None:
            console.print(build_no_destination_panel())
            return 1

        def _echo(latest: TripSnapshot, result: EvaluationResult) -> None:
            console.print(build_status_line(latest, result))

        def _connected() -> None:
            console.print(
                f"[green]✓ Tracking {snapshot.train_type} {snapshot.trip_number} to {destination}.[/] "
                "[dim]Stop it by pressing Ctrl + C[/]"
            )

        controller = TripController(
            source=portal,
            display=DiscordPresence(config.client_id),
            destination=destination,
            series=status.series,
            refresh_interval=config.refresh_interval,
            project_url=config.project_url,
            on_update=_echo,
            on_connected=_connected,
        )

        cancelled = asyncio.Event()
        restore_signals = install_interrupt_handler(cancelled)

        console.print("[dim]Connecting to discord ipc...[/]")
        try:
            state = await controller.run(cancelled)
        finally:
            restore_signals()

    if state is LoopState.ARRIVED and isinstance(controller.last_result, Arrived):
        console.print(build_arrival_panel(controller.last_result.stop))
    elif state is LoopState.CANCELLED:
        console.print("\n[dim]Received Ctrl + C, tracking stopped.[/]")
    return 0


def parse_args(argv: list[str] | None = None) -> Config:
    defaults = env_defaults()

    parser = argparse.ArgumentParser(
        description="Show your ICE trip as Discord Rich Presence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s                          # Pick your stop from the list
    %(prog)s --to "Köln Hbf"          # Leave the train in Cologne
    %(prog)s --once                   # Print the stop list and exit
    %(prog)s -r 60 --retries 5        # Slower refresh, more patient fetches

Run this while connected to the WIFIonICE network with Discord open.
        """
    )
    parser.add_argument(
        "--to",
        dest="destination",
        metavar="STATION",
        help="Station where you leave the train (prompted if not given)"
    )
    parser.add_argument(
        "-r", "--refresh",
        type=int,
        default=REFRESH_INTERVAL,
        help=f"Refresh interval in seconds (default: {REFRESH_INTERVAL})"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Display the trip once and exit (no Discord presence)"
    )
    parser.add_argument(
        "--client-id",
        default=defaults["client_id"],
        help="Discord application id to publish the presence under"
    )
    parser.add_argument(
        "--project-url",
        default=defaults["project_url"],
        help="URL for the presence's \"Try now\" button (omitted if not set)"
    )
    parser.add_argument(
        "--api-base",
        default=defaults["api_base"],
        help="ICE Portal API base URL"
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=MAX_RETRIES,
        help=f"Attempts per fetch before giving up (default: {MAX_RETRIES})"
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=RETRY_DELAY,
        help=f"Base delay between fetch attempts in seconds (default: {RETRY_DELAY})"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output"
    )

    args = parser.parse_args(argv)

    if args.refresh <= 0:
        parser.error("--refresh must be positive")

    return Config(
        destination=args.destination,
        refresh_interval=args.refresh,
        client_id=args.client_id,
        project_url=args.project_url,
        api_base=args.api_base,
        retry=RetryPolicy(max_retries=args.retries, retry_delay=args.retry_delay),
        verbose=args.verbose,
        once=args.once,
    )


def main(argv: list[str] | None = None):
    config = parse_args(argv)
    console = Console()
    setup_logging(console, config.verbose)

    try:
        exit_code = asyncio.run(track(config, console))
    except IcePresenceError as e:
        logger.debug("Tracking failed", exc_info=True)
        console.print(build_error_panel(str(e)))
        sys.exit(1)
    except KeyboardInterrupt:
        # Ctrl + C before the poll loop took over the signal
        console.print("\n[dim]Tracking stopped.[/]")
        sys.exit(0)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
