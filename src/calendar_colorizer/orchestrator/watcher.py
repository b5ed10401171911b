"""Local trigger watcher for change-driven and daily runs."""

import asyncio
import signal
from datetime import datetime
from types import FrameType
from typing import TYPE_CHECKING

from rich.console import Console

from calendar_colorizer.orchestrator.engine import RunOrchestrator
from calendar_colorizer.orchestrator.models import RunMode, RunResult
from calendar_colorizer.orchestrator.triggers import TriggerKind, TriggerRegistry

if TYPE_CHECKING:
    from calendar_colorizer.config import Settings

console = Console()


class CalendarWatcher:
    """
    Runs the registered triggers locally.

    Polls the calendar for a newer modification time (on_event_updated
    trigger) and runs a full pass whenever the daily interval has elapsed
    (daily trigger). Only one run is in flight at a time. Nothing is
    persisted: a restarted watcher starts from a fresh baseline.
    """

    def __init__(
        self,
        settings: "Settings",
        orchestrator: RunOrchestrator,
        registry: TriggerRegistry,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            settings: Application settings (poll interval, startup scan).
            orchestrator: Runs the colorizing passes.
            registry: Source of the registered triggers.
        """
        self.settings = settings
        self.orchestrator = orchestrator
        self.registry = registry

        # In-memory state
        self._last_modified: float | None = None
        # event id -> modification time of our own last write to it
        self._own_writes: dict[str, float] = {}
        self._last_scheduled_run: datetime | None = None
        self._run_in_progress: bool = False
        self._stop_requested: bool = False

        # Runtime options (can be overridden per-run)
        self._verbose: int = 0
        self._dry_run: bool = False

    def _latest_modification(self) -> float | None:
        """Timestamp of the newest modification in the window not made by us."""
        for event in self.orchestrator.fetch_events():
            if event.last_modified is None:
                return None
            stamp = event.last_modified.timestamp()
            if self._own_writes.get(event.id) != stamp:
                return stamp
        return None

    def _record_own_writes(self, result: RunResult) -> None:
        touched = {i for r in result.results for i in r.touched_ids}
        if not touched or result.dry_run:
            return
        for event in self.orchestrator.fetch_events():
            if event.id in touched and event.last_modified is not None:
                self._own_writes[event.id] = event.last_modified.timestamp()

    def _update_baseline(self) -> None:
        try:
            self._last_modified = self._latest_modification()
        except Exception as e:
            if self._verbose >= 2:
                console.print(f"[yellow]Warning: Failed to read calendar: {e}[/yellow]")

    def _should_run_for_change(self) -> tuple[bool, str | None]:
        """
        Check if an event was modified since the last check.

        Returns:
            Tuple of (should_run, reason_details).
        """
        if not self.registry.has_trigger(TriggerKind.ON_EVENT_UPDATED):
            return False, None

        latest = self._latest_modification()
        if latest is None:
            return False, None
        if self._last_modified is None or latest > self._last_modified:
            changed_at = datetime.fromtimestamp(latest).strftime("%H:%M:%S")
            return True, f"event modified at {changed_at}"
        return False, None

    def _should_run_scheduled(self) -> bool:
        """Check if a daily trigger is due."""
        intervals = [
            t.every_days for t in self.registry.list_triggers() if t.kind == TriggerKind.DAILY
        ]
        if not intervals:
            return False
        if self._last_scheduled_run is None:
            return True

        elapsed = (datetime.now() - self._last_scheduled_run).total_seconds()
        return elapsed >= min(intervals) * 24 * 60 * 60

    def _decide_trigger(self) -> tuple[RunMode | None, str | None]:
        """
        Decide whether to start a run and why.

        Returns:
            Tuple of (run_mode, details) or (None, None) if nothing is due.
        """
        # Priority 1: daily run (it covers any pending change as well)
        if self._should_run_scheduled():
            return RunMode.SCHEDULED, None

        # Priority 2: calendar changed
        should_run, details = self._should_run_for_change()
        if should_run:
            return RunMode.CHANGE_NOTIFICATION, details

        return None, None

    async def _trigger_run(self, mode: RunMode, details: str | None = None) -> None:
        """Execute a run with the orchestrator, unless one is already in flight."""
        if self._run_in_progress:
            if self._verbose >= 2:
                console.print("[dim]Run already in progress, skipping[/dim]")
            return

        self._run_in_progress = True
        try:
            if self._verbose >= 1:
                timestamp = datetime.now().strftime("%H:%M:%S")
                suffix = f": {details}" if details else ""
                console.print(f"[cyan][{timestamp}] Triggering run ({mode.value}){suffix}[/cyan]")

            # Edits made while the run is in flight stay newer than the baseline
            await asyncio.to_thread(self._update_baseline)
            result = await asyncio.to_thread(
                self.orchestrator.run, mode, dry_run=self._dry_run
            )

            if mode == RunMode.SCHEDULED:
                self._last_scheduled_run = datetime.now()
            # Our own writes bump modification times; don't react to them
            await asyncio.to_thread(self._record_own_writes, result)

            if self._verbose >= 1:
                console.print(
                    f"[green]Run complete:[/green] "
                    f"{result.events_colored} colored, "
                    f"{result.events_skipped} skipped, "
                    f"{result.errors} errors"
                )

        except Exception as e:
            if self._verbose >= 1:
                console.print(f"[red]Run error:[/red] {e}")
        finally:
            self._run_in_progress = False

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        def handle_signal(signum: int, frame: FrameType | None) -> None:
            sig_name = signal.Signals(signum).name
            if self._verbose >= 1:
                console.print(f"\n[yellow]Received {sig_name}, shutting down...[/yellow]")
            self._stop_requested = True

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

    async def run(
        self,
        *,
        verbose: int = 1,
        dry_run: bool = False,
        poll_interval: int | None = None,
    ) -> None:
        """
        Run the watcher loop.

        Args:
            verbose: Verbosity level (0=silent, 1=normal, 2=detailed).
            dry_run: If True, don't write to the calendar.
            poll_interval: Override poll_interval_seconds from settings.
        """
        self._verbose = verbose
        self._dry_run = dry_run
        interval = poll_interval or self.settings.poll_interval_seconds

        triggers = self.registry.list_triggers()
        if not triggers:
            console.print(
                "[yellow]No triggers registered. "
                "Run 'calendar-colorizer triggers init' first.[/yellow]"
            )
            return

        self._setup_signal_handlers()

        if verbose >= 1:
            kinds = ", ".join(t.kind.value for t in triggers)
            console.print(f"[bold]Watcher started[/bold] (poll every {interval}s, triggers: {kinds})")
            if dry_run:
                console.print("[yellow]DRY RUN MODE - no changes will be written[/yellow]")
            console.print("Press Ctrl+C to stop\n")

        if self.settings.watcher_startup_scan:
            await self._trigger_run(RunMode.SCHEDULED, "startup")
        else:
            await asyncio.to_thread(self._update_baseline)

        while not self._stop_requested:
            try:
                mode, details = await asyncio.to_thread(self._decide_trigger)
                if mode:
                    await self._trigger_run(mode, details)

                await asyncio.sleep(interval)

            except asyncio.CancelledError:
                break
            except Exception as e:
                if verbose >= 1:
                    console.print(f"[red]Watcher error:[/red] {e}")
                # Continue running despite errors
                await asyncio.sleep(interval)

        if verbose >= 1:
            console.print("[dim]Watcher stopped[/dim]")
