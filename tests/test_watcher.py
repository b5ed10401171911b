"""Tests for the local trigger watcher."""

import asyncio
from datetime import datetime, timedelta

import pytest

from calendar_colorizer.calendar.events import EventColor
from calendar_colorizer.calendar.memory import InMemoryEventStore
from calendar_colorizer.config import Settings
from calendar_colorizer.orchestrator import (
    CalendarWatcher,
    RunMode,
    RunOrchestrator,
    Trigger,
    TriggerKind,
    YamlTriggerRegistry,
)
from calendar_colorizer.rules.engine import ClassificationEngine

NOW = datetime(2025, 1, 10, 8, 0, 0)


class Clock:
    """Settable clock for the store."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class EditDuringRunOrchestrator(RunOrchestrator):
    """Orchestrator during whose run someone else edits the calendar."""

    def __init__(self, *args, edit, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.edit = edit

    def run(self, mode, *, dry_run=False):
        self.edit()
        return super().run(mode, dry_run=dry_run)


@pytest.fixture
def clock() -> Clock:
    return Clock(NOW)


@pytest.fixture
def watched_store(clock, make_event) -> InMemoryEventStore:
    store = InMemoryEventStore(clock=clock)
    store.events.append(
        make_event(id="one", guests=["a@example.com"], last_modified=NOW - timedelta(hours=1))
    )
    return store


@pytest.fixture
def registry(tmp_path) -> YamlTriggerRegistry:
    return YamlTriggerRegistry(tmp_path / "triggers.yaml")


@pytest.fixture
def watcher(watched_store, config, registry) -> CalendarWatcher:
    engine = ClassificationEngine(watched_store, config)
    orchestrator = RunOrchestrator(watched_store, engine, clock=lambda: NOW)
    return CalendarWatcher(Settings(_env_file=None), orchestrator, registry)


class TestDecideTrigger:
    """Tests for choosing the next run."""

    def test_nothing_registered(self, watcher) -> None:
        assert watcher._decide_trigger() == (None, None)

    def test_daily_due_when_never_run(self, watcher, registry) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.DAILY))
        assert watcher._decide_trigger() == (RunMode.SCHEDULED, None)

    def test_daily_not_due_after_recent_run(self, watcher, registry) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.DAILY))
        watcher._last_scheduled_run = datetime.now() - timedelta(hours=2)

        assert watcher._decide_trigger() == (None, None)

    def test_daily_due_after_interval(self, watcher, registry) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.DAILY))
        watcher._last_scheduled_run = datetime.now() - timedelta(days=1, minutes=1)

        assert watcher._decide_trigger()[0] == RunMode.SCHEDULED

    def test_change_detected(self, watcher, registry, watched_store, clock) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.ON_EVENT_UPDATED, calendar_id="primary"))
        watcher._update_baseline()
        assert watcher._decide_trigger() == (None, None)

        clock.now = NOW + timedelta(minutes=1)
        watched_store.set_title(watched_store.events[0], "Renamed")

        mode, details = watcher._decide_trigger()
        assert mode == RunMode.CHANGE_NOTIFICATION
        assert "event modified at" in details

    def test_daily_has_priority(self, watcher, registry) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.ON_EVENT_UPDATED, calendar_id="primary"))
        registry.create_trigger(Trigger(kind=TriggerKind.DAILY))

        assert watcher._decide_trigger()[0] == RunMode.SCHEDULED


class TestTriggerRun:
    """Tests for executing runs."""

    def test_run_refreshes_baseline(self, watcher, registry, watched_store, clock) -> None:
        registry.create_trigger(Trigger(kind=TriggerKind.ON_EVENT_UPDATED, calendar_id="primary"))
        clock.now = NOW + timedelta(minutes=1)

        asyncio.run(watcher._trigger_run(RunMode.SCHEDULED))

        assert watched_store.events[0].color == EventColor.ONE_ON_ONE
        assert watcher._last_scheduled_run is not None
        # The run's own write is not seen as a new change
        assert watcher._decide_trigger() == (None, None)

    def test_edit_during_run_is_picked_up(
        self, watched_store, config, registry, clock, make_event
    ) -> None:
        other = make_event(id="two", title="Notes", last_modified=NOW - timedelta(hours=2))
        watched_store.events.append(other)

        def edit() -> None:
            clock.now = NOW + timedelta(minutes=1)
            watched_store.set_title(other, "Notes (edited)")
            clock.now = NOW + timedelta(minutes=2)

        orchestrator = EditDuringRunOrchestrator(
            watched_store,
            ClassificationEngine(watched_store, config),
            clock=lambda: NOW,
            edit=edit,
        )
        watcher = CalendarWatcher(Settings(_env_file=None), orchestrator, registry)
        registry.create_trigger(Trigger(kind=TriggerKind.ON_EVENT_UPDATED, calendar_id="primary"))

        asyncio.run(watcher._trigger_run(RunMode.SCHEDULED))

        assert watched_store.events[0].color == EventColor.ONE_ON_ONE
        assert watcher._decide_trigger()[0] == RunMode.CHANGE_NOTIFICATION

    def test_single_flight(self, watcher, watched_store) -> None:
        watcher._run_in_progress = True

        asyncio.run(watcher._trigger_run(RunMode.SCHEDULED))

        assert watched_store.writes == []

    def test_dry_run(self, watcher, watched_store) -> None:
        watcher._dry_run = True

        asyncio.run(watcher._trigger_run(RunMode.SCHEDULED))

        assert watched_store.writes == []
        assert watcher._run_in_progress is False

    def test_run_without_triggers_returns(self, watcher, watched_store) -> None:
        asyncio.run(watcher.run(verbose=0))
        assert watched_store.writes == []
