"""nextup CLI - calendar agenda and next-event widgets for the terminal."""

import json
import logging
import sys
import time

import click

from .adapters import CompositeCalendarAdapter, FileSelectionStore
from .config import Config, load_config
from .core.agenda import AgendaHeader
from .core.calendar import EventInstance
from .core.render import format_agenda_lines, format_next_event
from .ports.calendar_source import DataSourceUnavailable, PermissionDenied
from .widgets import (
    FeedStatus,
    build_agenda,
    ensure_default_selection,
    find_next_event,
    project_countdown_trigger,
)


def _now_millis() -> int:
    return int(time.time() * 1000)


def _monotonic_millis() -> int:
    return int(time.monotonic() * 1000)


def _source(config: Config) -> CompositeCalendarAdapter:
    return CompositeCalendarAdapter.from_config(config)


def _store(config: Config) -> FileSelectionStore:
    return FileSelectionStore(config.selection_file)


def _event_dict(event: EventInstance) -> dict:
    return {
        "id": event.id,
        "title": event.title,
        "start_millis": event.start_millis,
        "end_millis": event.end_millis,
        "all_day": event.all_day,
        "calendar_id": event.calendar_id,
    }


@click.group()
@click.version_option(package_name="nextup")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """nextup - calendar agenda and countdown widgets."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def agenda(as_json: bool):
    """Show the agenda: an hour back to thirty days ahead."""
    config = load_config()
    tz = config.tzinfo()
    feed = build_agenda(_source(config), _store(config), _now_millis(), tz)

    if as_json:
        entries = []
        for entry in feed.entries:
            if isinstance(entry, AgendaHeader):
                entries.append({"type": "header", "label": entry.label, "anchor_millis": entry.anchor_millis})
            else:
                entries.append({"type": "item", "progress": entry.progress, "event": _event_dict(entry.event)})
        click.echo(
            json.dumps(
                {"status": feed.status.value, "message": feed.message, "entries": entries},
                indent=2,
            )
        )
        return

    match feed.status:
        case FeedStatus.OK:
            for line in format_agenda_lines(list(feed.entries), tz):
                click.echo(line)
        case FeedStatus.EMPTY:
            click.echo("No events scheduled.")
        case FeedStatus.PERMISSION_DENIED:
            click.echo(f"{feed.message} - run 'nextup auth' or check your calendar source", err=True)
            sys.exit(1)
        case FeedStatus.ERROR:
            click.echo(feed.message, err=True)
            sys.exit(1)


@main.command("next")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def next_event(as_json: bool):
    """Show the next upcoming event with a countdown."""
    config = load_config()
    now = _now_millis()
    monotonic_now = _monotonic_millis()
    feed = find_next_event(_source(config), _store(config), now)

    trigger = None
    if feed.event is not None:
        trigger = project_countdown_trigger(feed.event.start_millis, now, monotonic_now)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "status": feed.status.value,
                    "message": feed.message,
                    "event": _event_dict(feed.event) if feed.event else None,
                    "countdown_trigger_millis": trigger,
                },
                indent=2,
            )
        )
        return

    match feed.status:
        case FeedStatus.OK:
            for line in format_next_event(feed.event, now, config.tzinfo()):
                click.echo(line)
        case FeedStatus.EMPTY:
            click.echo(feed.message)
        case FeedStatus.PERMISSION_DENIED | FeedStatus.ERROR:
            click.echo(feed.message, err=True)
            sys.exit(1)


@main.command()
def calendars():
    """List calendars and which ones are shown."""
    config = load_config()
    source = _source(config)

    if not source.has_read_permission():
        click.echo("No readable calendar source - run 'nextup auth'", err=True)
        sys.exit(1)

    try:
        found = source.list_calendars()
    except (DataSourceUnavailable, PermissionDenied) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    selection = ensure_default_selection(_store(config), found)
    if not found:
        click.echo("No calendars found.")
        return

    for info in found:
        mark = "x" if selection.selected_calendar_ids is None or info.id in selection.selected_calendar_ids else " "
        click.echo(f"[{mark}] {info.name}  ({info.id})")


@main.command()
@click.argument("calendar_ids", nargs=-1)
@click.option("--all", "select_all", is_flag=True, help="Show every calendar (forget the selection)")
@click.option("--none", "select_none", is_flag=True, help="Hide every calendar")
def select(calendar_ids: tuple[str, ...], select_all: bool, select_none: bool):
    """Choose which calendars the widgets show."""
    if sum([bool(calendar_ids), select_all, select_none]) != 1:
        click.echo("Give calendar IDs, --all or --none (exactly one)", err=True)
        sys.exit(2)

    store = _store(load_config())
    if select_all:
        store.clear_selection()
        click.echo("Showing all calendars.")
    elif select_none:
        store.write_selection([])
        click.echo("Hiding all calendars.")
    else:
        store.write_selection(calendar_ids)
        click.echo(f"Showing {len(set(calendar_ids))} calendar(s).")


@main.command()
@click.option("--account", default=None, help="Label of account to authenticate (default: all)")
def auth(account: str | None):
    """Authenticate with Google Calendar."""
    config = load_config()

    if not config.google_accounts:
        click.echo("No Google accounts configured in nextup.conf", err=True)
        sys.exit(1)

    if not config.google_client_secret_file:
        click.echo("GOOGLE_CLIENT_SECRET_FILE not set in nextup.conf", err=True)
        sys.exit(1)

    from .adapters.google_calendar import GoogleCalendarAdapter

    for acct in config.google_accounts:
        if account and acct.label != account:
            continue

        click.echo(f"\nAuthenticating: {acct.label or acct.config_folder}")
        adapter = GoogleCalendarAdapter(
            config_folder=acct.config_folder,
            label=acct.label,
            client_secret_file=config.google_client_secret_file,
        )
        if adapter.authenticate():
            click.echo(f"  ✓ Token saved to {adapter._token_path}")
        else:
            click.echo("  ✗ Authentication failed", err=True)
