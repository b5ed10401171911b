"""Command-line interface for calendar-colorizer."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from calendar_colorizer.config import ColorizerConfig, Settings, load_colorizer_config

app = typer.Typer(
    name="calendar-colorizer",
    help="Automatic color tags and travel time blocks for Google Calendar",
    no_args_is_help=True,
)
console = Console()

# Sub-command groups
rules_app = typer.Typer(help="Inspect the classification rules")
triggers_app = typer.Typer(help="Manage run triggers")

app.add_typer(rules_app, name="rules")
app.add_typer(triggers_app, name="triggers")

EXAMPLE_CONFIG = """# Calendar Colorizer Configuration
# Rules run in a fixed order: de-tentative, tentative, interview,
# external (physical location), one-on-one, group-meeting.

colorizer:
  # Titles starting with this are tentative
  tentative_marker: "?"
  interview_keyword: "interview"

  # Locations starting with these (or containing a link) are virtual
  video_prefixes:
    - "Google"
    - "Microsoft Teams"
  link_marker: "http"

  # Prefix an in-person event title with one of these to get travel blocks
  transports:
    "🚗": driving
    "🚎": transit
  default_transport: "🚗"
  transport_padding_minutes: 15
  travel_title_template: "Travel ({marker})"

  # Google Calendar colorIds per category
  palette:
    default: "7"
    tentative: "8"
    external: "5"
    one_on_one: "3"
    group_meeting: "9"
    interview: "4"

  # Check for an existing travel block before creating one
  dedupe_travel_events: false
"""


def get_settings() -> Settings:
    """Load application settings."""
    return Settings()


def _setup(settings: Settings) -> tuple[ColorizerConfig, logging.Logger]:
    from calendar_colorizer.logging import get_calendar_logger, setup_logging

    setup_logging(
        log_dir=settings.log_dir,
        log_level=settings.log_level,
        max_bytes=settings.log_rotation_size_mb * 1024 * 1024,
        backup_count=settings.log_backup_count,
        debug=settings.debug,
    )
    config = load_colorizer_config(settings.colorizer_path, home_address=settings.home_address)
    return config, get_calendar_logger(settings.calendar_id)


def _build_orchestrator(settings, config, store, router, logger, window=None):
    from calendar_colorizer.orchestrator import RunOrchestrator
    from calendar_colorizer.rules import ClassificationEngine
    from calendar_colorizer.travel import TravelSynthesizer

    synthesizer = TravelSynthesizer(store, router, config, logger=logger)
    engine = ClassificationEngine(store, config, synthesizer=synthesizer, logger=logger)
    return RunOrchestrator(
        store,
        engine,
        skip_check=settings.skip_check,
        past_days=settings.past_days,
        future_days=settings.future_days,
        window=window,
        logger=logger,
    )


def _google_backends(settings: Settings, config: ColorizerConfig):
    """Connect to Google Calendar and, when a key is configured, Google Maps."""
    from calendar_colorizer.calendar.google import GoogleCalendarStore, get_calendar_service
    from calendar_colorizer.routing import GoogleMapsRouter

    service = get_calendar_service(
        credentials_path=settings.credentials_path,
        token_path=settings.token_path,
    )
    store = GoogleCalendarStore(service, settings.calendar_id, palette=config.palette)
    router = GoogleMapsRouter(settings.google_maps_api_key) if settings.google_maps_api_key else None
    return store, router


def _print_run_result(result) -> None:
    """Print the per-event table and summary of a run."""
    changed = [r for r in result.results if r.changes or r.error]
    if changed:
        table = Table(title="Dry run: planned changes" if result.dry_run else "Changes")
        table.add_column("Event", style="cyan", max_width=40)
        table.add_column("Rule", style="green")
        table.add_column("Changes")
        for item in changed:
            table.add_row(
                item.title[:40],
                item.rule_matched or "-",
                f"[red]{item.error}[/red]" if item.error else "\n".join(item.changes),
            )
        console.print(table)

    console.print("\n[bold]Summary[/bold]")
    console.print(f"  Mode: {result.mode.value}")
    console.print(f"  Events fetched: {result.events_fetched}")
    console.print(f"  Events processed: {result.events_processed}")
    console.print(f"  Events skipped: {result.events_skipped}")
    console.print(f"  Events colored: {result.events_colored}")
    console.print(f"  Travel events created: {result.travel_events_created}")
    console.print(f"  Errors: {result.errors}")
    console.print(f"  Duration: {result.duration_seconds:.1f}s")


@app.command()
def version() -> None:
    """Show version information."""
    from calendar_colorizer import __version__

    console.print(f"calendar-colorizer v{__version__}")


@app.command()
def init(
    config_dir: Annotated[
        Path | None,
        typer.Option("--config-dir", "-c", help="Configuration directory"),
    ] = None,
) -> None:
    """Initialize configuration directory with an example config file."""
    settings = get_settings()
    if config_dir:
        settings.config_dir = config_dir

    settings.ensure_config_dir()

    if not settings.colorizer_path.exists():
        settings.colorizer_path.write_text(EXAMPLE_CONFIG, encoding="utf-8")
        console.print(f"[green]Created[/green] {settings.colorizer_path}")

    console.print(f"\n[bold]Configuration initialized at:[/bold] {settings.config_dir}")
    if not settings.home_address:
        console.print(
            "[yellow]Set CALENDAR_COLORIZER_HOME_ADDRESS to enable travel events[/yellow]"
        )
    if not settings.credentials_path.exists():
        console.print(
            f"Place your Google OAuth client file at [bold]{settings.credentials_path}[/bold]"
        )


@app.command()
def run(
    changed: Annotated[
        bool,
        typer.Option("--changed", help="Process only the most recently modified event"),
    ] = False,
    dry_run: Annotated[
        bool | None,
        typer.Option("--dry-run/--execute", help="Show changes without writing them"),
    ] = None,
) -> None:
    """Colorize the calendar once."""
    from calendar_colorizer.errors import ColorizerError
    from calendar_colorizer.orchestrator import RunMode

    settings = get_settings()
    try:
        config, logger = _setup(settings)
        store, router = _google_backends(settings, config)
    except (ColorizerError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    orchestrator = _build_orchestrator(settings, config, store, router, logger)
    mode = RunMode.CHANGE_NOTIFICATION if changed else RunMode.SCHEDULED
    result = orchestrator.run(mode, dry_run=settings.dry_run if dry_run is None else dry_run)
    _print_run_result(result)

    if result.errors:
        raise typer.Exit(1)


@app.command()
def simulate(
    events_file: Annotated[Path, typer.Argument(help="YAML file with events")],
    changed: Annotated[
        bool,
        typer.Option("--changed", help="Process only the most recently modified event"),
    ] = False,
    travel_minutes: Annotated[
        int | None,
        typer.Option("--travel-minutes", "-t", help="Travel time answered for every route"),
    ] = None,
) -> None:
    """Run the rules over events from a YAML file, without a calendar."""
    from calendar_colorizer.calendar.memory import InMemoryEventStore, load_events
    from calendar_colorizer.orchestrator import RunMode
    from calendar_colorizer.routing import FixedDurationRouter

    if not events_file.exists():
        console.print(f"[red]File not found:[/red] {events_file}")
        raise typer.Exit(1)

    settings = get_settings()
    try:
        config, logger = _setup(settings)
        events = load_events(events_file)
    except (KeyError, ValueError) as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1)

    if not events:
        console.print("[yellow]No events in file[/yellow]")
        return

    store = InMemoryEventStore(events)
    router = FixedDurationRouter(travel_minutes) if travel_minutes is not None else None
    # The whole file is in scope, whatever its dates
    window = (min(e.start for e in events), max(e.end for e in events))
    orchestrator = _build_orchestrator(settings, config, store, router, logger, window=window)

    mode = RunMode.CHANGE_NOTIFICATION if changed else RunMode.SCHEDULED
    result = orchestrator.run(mode)
    _print_run_result(result)


@app.command()
def watch(
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Verbosity")] = 1,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show changes without writing them")
    ] = False,
    poll_interval: Annotated[
        int | None, typer.Option("--poll-interval", help="Seconds between change checks")
    ] = None,
) -> None:
    """Run registered triggers continuously."""
    from calendar_colorizer.errors import ColorizerError
    from calendar_colorizer.orchestrator import CalendarWatcher, YamlTriggerRegistry

    settings = get_settings()
    try:
        config, logger = _setup(settings)
        store, router = _google_backends(settings, config)
    except (ColorizerError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    orchestrator = _build_orchestrator(settings, config, store, router, logger)
    watcher = CalendarWatcher(settings, orchestrator, YamlTriggerRegistry(settings.triggers_path))
    asyncio.run(
        watcher.run(
            verbose=verbose, dry_run=dry_run or settings.dry_run, poll_interval=poll_interval
        )
    )


# === Rules Commands ===


@rules_app.command("list")
def rules_list() -> None:
    """List the classification rules in evaluation order."""
    from calendar_colorizer.rules import DEFAULT_RULES

    table = Table(title="Classification Rules")
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("Terminal", style="yellow")
    table.add_column("Description")

    for i, rule in enumerate(DEFAULT_RULES, start=1):
        table.add_row(str(i), rule.name, "✓" if rule.terminal else "✗", rule.description)

    console.print(table)


# === Triggers Commands ===


@triggers_app.command("init")
def triggers_init() -> None:
    """Recreate the change and daily triggers."""
    from calendar_colorizer.orchestrator import YamlTriggerRegistry, initialize_triggers

    settings = get_settings()
    triggers = initialize_triggers(YamlTriggerRegistry(settings.triggers_path), settings.calendar_id)

    console.print("[green]Triggers initialized successfully:[/green]")
    for trigger in triggers:
        console.print(f" - Trigger type: {trigger.kind.value}")


@triggers_app.command("list")
def triggers_list() -> None:
    """List registered triggers."""
    from calendar_colorizer.orchestrator import TriggerKind, YamlTriggerRegistry

    settings = get_settings()
    triggers = YamlTriggerRegistry(settings.triggers_path).list_triggers()

    if not triggers:
        console.print("[yellow]No triggers registered[/yellow]")
        return

    table = Table(title="Triggers")
    table.add_column("ID", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Calendar / Interval", style="green")

    for trigger in triggers:
        if trigger.kind == TriggerKind.ON_EVENT_UPDATED:
            detail = trigger.calendar_id or "-"
        else:
            detail = f"every {trigger.every_days} day(s)"
        table.add_row(trigger.id, trigger.kind.value, detail)

    console.print(table)
