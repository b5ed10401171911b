"""Tests for the in-memory event store and the event writer."""

from datetime import datetime, timedelta

import pytest

from calendar_colorizer.calendar.events import EventColor, GuestStatus
from calendar_colorizer.calendar.memory import load_events
from calendar_colorizer.calendar.writer import EventWriter, MutationKind
from calendar_colorizer.errors import EventStoreError

NOW = datetime(2025, 1, 10, 8, 0, 0)


class TestInMemoryEventStore:
    """Tests for InMemoryEventStore."""

    def test_list_events_overlapping_window(self, store, make_event) -> None:
        start = datetime(2025, 1, 10, 10, 0)
        store.events.extend(
            [
                make_event(id="inside", start=start),
                make_event(id="overlaps", start=start - timedelta(minutes=30)),
                make_event(id="before", start=start - timedelta(hours=2)),
            ]
        )

        found = store.list_events(start, start + timedelta(hours=1))

        assert [e.id for e in found] == ["inside", "overlaps"]

    def test_writes_bump_last_modified(self, store, make_event) -> None:
        event = make_event(last_modified=NOW - timedelta(days=2))

        store.set_color(event, EventColor.EXTERNAL)

        assert event.color == EventColor.EXTERNAL
        assert event.last_modified == NOW

    def test_create_event(self, store) -> None:
        created = store.create_event(
            "Travel (🚗)", NOW, NOW + timedelta(minutes=35), travel_key="x:to"
        )

        assert created in store.events
        assert store.find_by_travel_key("x:to") is created
        assert store.find_by_travel_key("x:back") is None

    def test_fail_on(self, store, make_event) -> None:
        store.fail_on.add("set_title")

        with pytest.raises(EventStoreError) as exc_info:
            store.set_title(make_event(), "New")

        assert exc_info.value.operation == "set_title"


class TestLoadEvents:
    """Tests for YAML event files."""

    def test_load(self, tmp_path) -> None:
        path = tmp_path / "events.yaml"
        path.write_text(
            "events:\n"
            "  - id: one\n"
            "    title: Sync\n"
            "    start: 2025-01-10T10:00:00\n"
            "    end: 2025-01-10T10:30:00\n"
            "    guests: [sam@example.com]\n"
            "    my_status: declined\n"
            "    color: tentative\n"
            "  - title: Untitled id\n"
            "    start: '2025-01-10T11:00:00+01:00'\n"
            "    end: '2025-01-10T12:00:00+01:00'\n",
            encoding="utf-8",
        )

        first, second = load_events(path)

        assert first.id == "one"
        assert first.guests == ["sam@example.com"]
        assert first.my_status == GuestStatus.DECLINED
        assert first.color == EventColor.TENTATIVE
        assert first.start.tzinfo is not None
        assert first.last_modified == first.start
        assert second.id == "1"
        assert second.start.utcoffset() == timedelta(hours=1)

    def test_missing_start(self, tmp_path) -> None:
        path = tmp_path / "events.yaml"
        path.write_text("events:\n  - title: x\n", encoding="utf-8")

        with pytest.raises(KeyError):
            load_events(path)


class TestEventWriter:
    """Tests for EventWriter."""

    def test_records_and_applies(self, store, make_event) -> None:
        event = make_event()
        writer = EventWriter(store)

        writer.set_color(event, EventColor.GROUP_MEETING)
        writer.set_title(event, "Renamed")

        assert [m.kind for m in writer.mutations] == [
            MutationKind.SET_COLOR,
            MutationKind.SET_TITLE,
        ]
        assert event.color == EventColor.GROUP_MEETING
        assert event.title == "Renamed"
        assert len(store.writes) == 2

    def test_dry_run_leaves_store_untouched(self, store, make_event) -> None:
        event = make_event()
        writer = EventWriter(store, dry_run=True)

        writer.set_color(event, EventColor.GROUP_MEETING)
        created = writer.create_event("Travel (🚗)", NOW, NOW + timedelta(minutes=5))

        assert event.color is None
        assert store.writes == []
        assert created.id == "dry-run:1"
        assert writer.mutations[0].describe() == "color -> group_meeting"
        assert writer.mutations[1].describe() == "create 'Travel (🚗)' 08:00-08:05"
