"""Run orchestration: picks the events of a run and colorizes them."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from calendar_colorizer.calendar.events import CalendarEvent
from calendar_colorizer.calendar.store import EventStore
from calendar_colorizer.calendar.writer import MutationKind
from calendar_colorizer.errors import ColorizerError
from calendar_colorizer.orchestrator.models import ProcessResult, RunMode, RunResult
from calendar_colorizer.rules.engine import ClassificationEngine
from calendar_colorizer.rules.skip import should_skip


def _now() -> datetime:
    return datetime.now().astimezone()


class RunOrchestrator:
    """Drives the skip filter and the classification engine over a calendar window."""

    def __init__(
        self,
        store: EventStore,
        engine: ClassificationEngine,
        *,
        skip_check: bool = True,
        past_days: int = 1,
        future_days: int = 28,
        window: tuple[datetime, datetime] | None = None,
        clock: Callable[[], datetime] = _now,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Event store to read the window from.
            engine: Classification engine applied to each event.
            skip_check: Run the skip filter before classifying.
            past_days: Days back to look, to catch last minute changes.
            future_days: Days into the future to look.
            window: Fixed (start, end) window instead of one around now.
            clock: Returns the current time.
            logger: Logger for the activity trace.
        """
        self.store = store
        self.engine = engine
        self.skip_check = skip_check
        self.past_days = past_days
        self.future_days = future_days
        self.fixed_window = window
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def window(self) -> tuple[datetime, datetime]:
        if self.fixed_window is not None:
            return self.fixed_window
        now = self.clock()
        return now - timedelta(days=self.past_days), now + timedelta(days=self.future_days)

    def fetch_events(self) -> list[CalendarEvent]:
        """Get the events of the window, most recently modified first."""
        start, end = self.window()
        events = self.store.list_events(start, end)
        return sorted(
            events,
            key=lambda e: e.last_modified.timestamp() if e.last_modified else float("-inf"),
            reverse=True,
        )

    def run(self, mode: RunMode, *, dry_run: bool = False) -> RunResult:
        """
        Run one colorizing pass.

        A change notification does not say which event changed, so only the
        most recently modified event is processed. A scheduled run processes
        every event in the window.

        Args:
            mode: What started the run.
            dry_run: If True, don't write to the calendar.

        Returns:
            RunResult with summary statistics.
        """
        started_at = datetime.now()
        result = RunResult(
            mode=mode,
            started_at=started_at,
            completed_at=started_at,  # Updated at end
            dry_run=dry_run,
        )

        try:
            events = self.fetch_events()
        except ColorizerError as e:
            self.logger.error(f"Could not read calendar events: {e}")
            result.errors += 1
            result.completed_at = datetime.now()
            return result

        result.events_fetched = len(events)

        if mode == RunMode.CHANGE_NOTIFICATION:
            self.logger.info("Triggered by calendar change")
            if not events:
                self.logger.warning("No events found in the window")
            targets = events[:1]
            for event in targets:
                self.logger.info(f"Most recently modified event: {event.title}")
                self.logger.info(f"Modified at: {event.last_modified}")
        else:
            self.logger.info(f"Scheduled run, events to process: {len(events)}")
            targets = events

        for event in targets:
            process_result = self.process_event(event, dry_run=dry_run)
            result.results.append(process_result)

            if process_result.skipped:
                result.events_skipped += 1
            elif process_result.success:
                result.events_processed += 1
                if process_result.colored:
                    result.events_colored += 1
                result.travel_events_created += process_result.travel_events_created
            else:
                result.errors += 1

        result.completed_at = datetime.now()
        return result

    def process_event(self, event: CalendarEvent, *, dry_run: bool = False) -> ProcessResult:
        """Skip-check and classify one event; errors are reported, never raised."""
        if self.skip_check and should_skip(event, self.logger):
            return ProcessResult(
                event_id=event.id, title=event.title, skipped=True, color=event.color
            )

        try:
            classification = self.engine.classify(event, dry_run=dry_run)
        except Exception as e:
            self.logger.error(f"Error colorizing {event.title}: {e}")
            return ProcessResult(
                event_id=event.id, title=event.title, success=False, error=str(e)
            )

        return ProcessResult(
            event_id=event.id,
            title=classification.title,
            color=classification.color,
            rule_matched=classification.rule,
            colored=any(m.kind == MutationKind.SET_COLOR for m in classification.mutations),
            changes=[m.describe() for m in classification.mutations],
            touched_ids=list(
                dict.fromkeys(m.event_id for m in classification.mutations if m.event_id)
            ),
            travel_events_created=classification.travel_events_created,
        )
