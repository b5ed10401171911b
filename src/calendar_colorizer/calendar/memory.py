"""In-memory event store for simulations and tests."""

import uuid
from datetime import datetime
from pathlib import Path

import yaml

from calendar_colorizer.calendar.events import CalendarEvent, EventColor, GuestStatus
from calendar_colorizer.calendar.store import EventStore
from calendar_colorizer.errors import EventStoreError


class InMemoryEventStore(EventStore):
    """Event store backed by a plain list.

    Every write bumps the event's last_modified, the way a real calendar does.
    Writes can be made to fail with ``fail_on`` to exercise error paths.
    """

    def __init__(
        self,
        events: list[CalendarEvent] | None = None,
        *,
        clock=lambda: datetime.now().astimezone(),
    ) -> None:
        self.events: list[CalendarEvent] = list(events or [])
        self.clock = clock
        self.fail_on: set[str] = set()
        self.writes: list[tuple[str, str, object]] = []

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise EventStoreError(f"{operation} failed", operation=operation)

    def list_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        self._check("list_events")
        return [e for e in self.events if e.end > start and e.start < end]

    def set_color(self, event: CalendarEvent, color: EventColor) -> None:
        self._check("set_color")
        event.color = color
        event.last_modified = self.clock()
        self.writes.append(("set_color", event.id, color))

    def set_title(self, event: CalendarEvent, title: str) -> None:
        self._check("set_title")
        event.title = title
        event.last_modified = self.clock()
        self.writes.append(("set_title", event.id, title))

    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        travel_key: str | None = None,
    ) -> CalendarEvent:
        self._check("create_event")
        event = CalendarEvent(
            id=uuid.uuid4().hex,
            title=title,
            start=start,
            end=end,
            last_modified=self.clock(),
            travel_key=travel_key,
        )
        self.events.append(event)
        self.writes.append(("create_event", event.id, title))
        return event

    def find_by_travel_key(self, travel_key: str) -> CalendarEvent | None:
        for event in self.events:
            if event.travel_key == travel_key:
                return event
        return None


def load_events(path: Path) -> list[CalendarEvent]:
    """
    Load events from a YAML fixture file.

    Expected layout::

        events:
          - id: standup
            title: Team standup
            start: 2025-01-10T09:00:00
            end: 2025-01-10T09:15:00
            guests: [a@example.com, b@example.com]
            color: tentative          # optional
            my_status: accepted       # optional
            location: Main St 1       # optional
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    events = []
    for i, raw in enumerate(data.get("events", [])):
        start = _as_datetime(raw["start"])
        events.append(
            CalendarEvent(
                id=str(raw.get("id", i)),
                title=raw.get("title") or "",
                start=start,
                end=_as_datetime(raw["end"]),
                location=raw.get("location"),
                color=EventColor(raw["color"]) if raw.get("color") else None,
                my_status=GuestStatus(raw.get("my_status", GuestStatus.NOT_APPLICABLE)),
                guests=list(raw.get("guests") or []),
                last_modified=_as_datetime(raw.get("last_modified", start)),
            )
        )
    return events


def _as_datetime(value: datetime | str) -> datetime:
    # PyYAML already turns unquoted ISO timestamps into datetimes
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    # Naive fixture times are local wall-clock times
    return value if value.tzinfo else value.astimezone()
