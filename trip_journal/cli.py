"""
Trip Journal CLI - Command-line interface.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import asyncio
import dataclasses
import getpass
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from keyring.errors import KeyringError

from trip_journal.core.client import APIError, StorageError, TripJournalError, ValidationError
from trip_journal.core.types import (
    EventCreate,
    EventUpdate,
    Location,
    MediaCreate,
    TripCreate,
    TripUpdate,
    encode_bytes,
    format_datetime,
    parse_datetime,
)
from trip_journal.sdk import JournalClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, bytes):
        return encode_bytes(value)
    return str(value)


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    if dataclasses.is_dataclass(data):
        data = dataclasses.asdict(data)
    elif isinstance(data, list):
        data = [dataclasses.asdict(d) if dataclasses.is_dataclass(d) else d for d in data]
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=_json_default))


def error_output(error: TripJournalError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def run(coro: Awaitable[Any]) -> Any:
    """Run an SDK coroutine, turning API failures into JSON errors."""
    try:
        return asyncio.run(coro)
    except APIError as e:
        error_output(e)


# =============================================================================
# Argument Helpers
# =============================================================================


def _date_arg(value: str) -> datetime:
    try:
        return parse_datetime(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date '{value}': use ISO-8601, e.g. 2024-01-01T00:00:00Z") from e


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


def _location(args: argparse.Namespace) -> Location | None:
    if args.latitude is None and args.longitude is None:
        return None
    if args.latitude is None or args.longitude is None:
        raise ValidationError("--lat and --lng must be given together")
    return Location(latitude=args.latitude, longitude=args.longitude, address=args.address)


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_register(client: JournalClient, args: argparse.Namespace) -> None:
    """Create an account and store the token."""
    token = run(client.auth.register(args.username, _password(args)))
    json_output({"token_type": token.token_type, "message": "Registered and signed in."})


def cmd_login(client: JournalClient, args: argparse.Namespace) -> None:
    """Sign in and store the token."""
    token = run(client.auth.login(args.username, _password(args)))
    json_output({"token_type": token.token_type, "message": "Signed in."})


def cmd_logout(client: JournalClient, _args: argparse.Namespace) -> None:
    """Forget the stored token."""
    client.auth.logout()
    json_output({"message": "Signed out."})


def cmd_status(client: JournalClient, _args: argparse.Namespace) -> None:
    """Show whether a token is stored."""
    json_output({"authenticated": client.is_authenticated, "base_url": client.base_url})


def cmd_trips_list(client: JournalClient, _args: argparse.Namespace) -> None:
    """List trips."""
    trips = run(client.trips.list())
    if is_tty():
        if not trips:
            print("No trips found.")
            return
        table_output(
            ["ID", "Name", "Start", "End", "Events"],
            [[t.id, t.name, format_datetime(t.start_date), format_datetime(t.end_date), len(t.events)] for t in trips],
            [8, 30, 20, 20, 6],
        )
    else:
        json_output(trips)


def cmd_trips_get(client: JournalClient, args: argparse.Namespace) -> None:
    """Get a trip by ID."""
    json_output(run(client.trips.get(args.trip_id)))


def cmd_trips_create(client: JournalClient, args: argparse.Namespace) -> None:
    """Create a trip."""
    request = TripCreate(name=args.name, start_date=_date_arg(args.start), end_date=_date_arg(args.end))
    json_output(run(client.trips.create(request)))


def cmd_trips_update(client: JournalClient, args: argparse.Namespace) -> None:
    """Replace a trip's fields."""
    request = TripUpdate(name=args.name, start_date=_date_arg(args.start), end_date=_date_arg(args.end))
    json_output(run(client.trips.update(args.trip_id, request)))


def cmd_trips_delete(client: JournalClient, args: argparse.Namespace) -> None:
    """Delete a trip."""
    run(client.trips.delete(args.trip_id))
    json_output({"deleted": args.trip_id})


def cmd_events_list(client: JournalClient, _args: argparse.Namespace) -> None:
    """List events."""
    events = run(client.events.list())
    if is_tty():
        if not events:
            print("No events found.")
            return
        table_output(
            ["ID", "Trip", "Name", "Date"],
            [[e.id, e.trip_id, e.name, format_datetime(e.date)] for e in events],
            [8, 8, 30, 20],
        )
    else:
        json_output(events)


def cmd_events_get(client: JournalClient, args: argparse.Namespace) -> None:
    """Get an event by ID."""
    json_output(run(client.events.get(args.event_id)))


def cmd_events_create(client: JournalClient, args: argparse.Namespace) -> None:
    """Create an event on a trip."""
    request = EventCreate(
        trip_id=args.trip_id,
        name=args.name,
        date=_date_arg(args.date),
        note=args.note,
        location=_location(args),
        transition_from_previous=args.transition,
    )
    json_output(run(client.events.create(request)))


def cmd_events_update(client: JournalClient, args: argparse.Namespace) -> None:
    """Replace an event's fields."""
    request = EventUpdate(
        name=args.name,
        date=_date_arg(args.date),
        note=args.note,
        location=_location(args),
        transition_from_previous=args.transition,
    )
    json_output(run(client.events.update(args.event_id, request)))


def cmd_events_delete(client: JournalClient, args: argparse.Namespace) -> None:
    """Delete an event."""
    run(client.events.delete(args.event_id))
    json_output({"deleted": args.event_id})


def cmd_media_list(client: JournalClient, _args: argparse.Namespace) -> None:
    """List media."""
    media = run(client.media.list())
    if is_tty():
        if not media:
            print("No media found.")
            return
        table_output(
            ["ID", "Event", "Bytes"],
            [[m.id, m.event_id, len(m.base64_data)] for m in media],
            [8, 8, 10],
        )
    else:
        json_output(media)


def cmd_media_get(client: JournalClient, args: argparse.Namespace) -> None:
    """Get a media item by ID, optionally writing its data to a file."""
    media = run(client.media.get(args.media_id))
    if args.output:
        Path(args.output).write_bytes(media.base64_data)
        json_output({"id": media.id, "event_id": media.event_id, "written": args.output})
    else:
        json_output(media)


def cmd_media_add(client: JournalClient, args: argparse.Namespace) -> None:
    """Attach a file to an event."""
    path = Path(args.file)
    if not path.is_file():
        raise ValidationError(f"File not found: {args.file}")
    media = run(client.media.create(MediaCreate(event_id=args.event_id, base64_data=path.read_bytes())))
    json_output({"id": media.id, "event_id": media.event_id, "bytes": len(media.base64_data)})


def cmd_media_delete(client: JournalClient, args: argparse.Namespace) -> None:
    """Delete a media item."""
    run(client.media.delete(args.media_id))
    json_output({"deleted": args.media_id})


# =============================================================================
# Main CLI
# =============================================================================


def _add_event_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Event name")
    parser.add_argument("date", help="Event date (ISO-8601)")
    parser.add_argument("--note", help="Free-form note")
    parser.add_argument("--lat", dest="latitude", type=float, help="Latitude")
    parser.add_argument("--lng", dest="longitude", type=float, help="Longitude")
    parser.add_argument("--address", help="Address of the location")
    parser.add_argument("--transition", help="How you got here from the previous event")


def create_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Trip Journal CLI - Command-line interface for the Trip Journal API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  TTY (human):  Pretty tables
  Pipe:         Full JSON

Examples:
  trip-journal login alice
  trip-journal trips create Paris 2024-01-01T00:00:00Z 2024-01-05T00:00:00Z
  trip-journal events create 1 "Louvre" 2024-01-02T10:00:00Z --lat 48.86 --lng 2.33
  trip-journal media add 3 photo.jpg
  trip-journal trips list | jq '.[].name'
""",
    )
    parser.add_argument("--base-url", help="API base URL (overrides TRIP_JOURNAL_BASE_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Auth ==========
    register = subparsers.add_parser("register", help="Create an account")
    register.add_argument("username", help="Username")
    register.add_argument("--password", "-p", help="Password (prompted if omitted)")
    register.set_defaults(func=cmd_register)

    login = subparsers.add_parser("login", help="Sign in")
    login.add_argument("username", help="Username")
    login.add_argument("--password", "-p", help="Password (prompted if omitted)")
    login.set_defaults(func=cmd_login)

    logout = subparsers.add_parser("logout", help="Forget the stored token")
    logout.set_defaults(func=cmd_logout)

    status = subparsers.add_parser("status", help="Show sign-in status")
    status.set_defaults(func=cmd_status)

    # ========== Trips ==========
    trips = subparsers.add_parser("trips", help="Manage trips")
    trips.set_defaults(func=lambda _c, _a: trips.print_help())
    trips_sub = trips.add_subparsers(dest="subcommand")

    t_list = trips_sub.add_parser("list", help="List trips")
    t_list.set_defaults(func=cmd_trips_list)

    t_get = trips_sub.add_parser("get", help="Get trip details")
    t_get.add_argument("trip_id", type=int, help="Trip ID")
    t_get.set_defaults(func=cmd_trips_get)

    t_create = trips_sub.add_parser("create", help="Create a trip")
    t_create.add_argument("name", help="Trip name")
    t_create.add_argument("start", help="Start date (ISO-8601)")
    t_create.add_argument("end", help="End date (ISO-8601)")
    t_create.set_defaults(func=cmd_trips_create)

    t_update = trips_sub.add_parser("update", help="Replace a trip's fields")
    t_update.add_argument("trip_id", type=int, help="Trip ID")
    t_update.add_argument("name", help="Trip name")
    t_update.add_argument("start", help="Start date (ISO-8601)")
    t_update.add_argument("end", help="End date (ISO-8601)")
    t_update.set_defaults(func=cmd_trips_update)

    t_delete = trips_sub.add_parser("delete", help="Delete a trip")
    t_delete.add_argument("trip_id", type=int, help="Trip ID")
    t_delete.set_defaults(func=cmd_trips_delete)

    # ========== Events ==========
    events = subparsers.add_parser("events", help="Manage events")
    events.set_defaults(func=lambda _c, _a: events.print_help())
    events_sub = events.add_subparsers(dest="subcommand")

    e_list = events_sub.add_parser("list", help="List events")
    e_list.set_defaults(func=cmd_events_list)

    e_get = events_sub.add_parser("get", help="Get event details")
    e_get.add_argument("event_id", type=int, help="Event ID")
    e_get.set_defaults(func=cmd_events_get)

    e_create = events_sub.add_parser("create", help="Create an event")
    e_create.add_argument("trip_id", type=int, help="Trip ID")
    _add_event_fields(e_create)
    e_create.set_defaults(func=cmd_events_create)

    e_update = events_sub.add_parser("update", help="Replace an event's fields")
    e_update.add_argument("event_id", type=int, help="Event ID")
    _add_event_fields(e_update)
    e_update.set_defaults(func=cmd_events_update)

    e_delete = events_sub.add_parser("delete", help="Delete an event")
    e_delete.add_argument("event_id", type=int, help="Event ID")
    e_delete.set_defaults(func=cmd_events_delete)

    # ========== Media ==========
    media = subparsers.add_parser("media", help="Manage media")
    media.set_defaults(func=lambda _c, _a: media.print_help())
    media_sub = media.add_subparsers(dest="subcommand")

    m_list = media_sub.add_parser("list", help="List media")
    m_list.set_defaults(func=cmd_media_list)

    m_get = media_sub.add_parser("get", help="Get a media item")
    m_get.add_argument("media_id", type=int, help="Media ID")
    m_get.add_argument("--output", "-o", help="Write the media bytes to this file")
    m_get.set_defaults(func=cmd_media_get)

    m_add = media_sub.add_parser("add", help="Attach a file to an event")
    m_add.add_argument("event_id", type=int, help="Event ID")
    m_add.add_argument("file", help="File to upload")
    m_add.set_defaults(func=cmd_media_add)

    m_delete = media_sub.add_parser("delete", help="Delete a media item")
    m_delete.add_argument("media_id", type=int, help="Media ID")
    m_delete.set_defaults(func=cmd_media_delete)

    return parser


def main(argv: list[str] | None = None, client_factory: Callable[..., JournalClient] = JournalClient) -> None:
    """Main CLI entry point."""
    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Run command (all subparsers have default funcs that print help)
    try:
        client = client_factory(base_url=args.base_url)
        args.func(client, args)
    except TripJournalError as e:
        error_output(e)
    except (KeyringError, OSError) as e:
        error_output(StorageError(f"{type(e).__name__}: {e}"))


if __name__ == "__main__":
    main()
