"""Recorded writes against an event store."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from calendar_colorizer.calendar.events import CalendarEvent, EventColor
from calendar_colorizer.calendar.store import EventStore


class MutationKind(str, Enum):
    """Kinds of calendar writes."""

    SET_COLOR = "set_color"
    SET_TITLE = "set_title"
    CREATE_EVENT = "create_event"


class Mutation(BaseModel):
    """A single write made (or, in a dry run, planned) against the calendar."""

    kind: MutationKind
    event_id: str | None = Field(default=None, description="Target event (None for creations)")
    color: EventColor | None = None
    title: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    travel_key: str | None = None

    def describe(self) -> str:
        match self.kind:
            case MutationKind.SET_COLOR:
                return f"color -> {self.color.value if self.color else '?'}"
            case MutationKind.SET_TITLE:
                return f"title -> {self.title!r}"
            case MutationKind.CREATE_EVENT:
                span = f"{self.start:%H:%M}-{self.end:%H:%M}" if self.start and self.end else ""
                return f"create {self.title!r} {span}".rstrip()


class EventWriter:
    """Forwards writes to an event store and records them in order.

    With ``dry_run`` the writes are only recorded; the store and the passed
    events are left untouched.
    """

    def __init__(self, store: EventStore, *, dry_run: bool = False) -> None:
        self.store = store
        self.dry_run = dry_run
        self.mutations: list[Mutation] = []

    def set_color(self, event: CalendarEvent, color: EventColor) -> None:
        if not self.dry_run:
            self.store.set_color(event, color)
        self.mutations.append(
            Mutation(kind=MutationKind.SET_COLOR, event_id=event.id, color=color)
        )

    def set_title(self, event: CalendarEvent, title: str) -> None:
        if not self.dry_run:
            self.store.set_title(event, title)
        self.mutations.append(
            Mutation(kind=MutationKind.SET_TITLE, event_id=event.id, title=title)
        )

    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        travel_key: str | None = None,
    ) -> CalendarEvent:
        if self.dry_run:
            created = CalendarEvent(
                id=f"dry-run:{travel_key or len(self.mutations)}",
                title=title,
                start=start,
                end=end,
                travel_key=travel_key,
            )
        else:
            created = self.store.create_event(title, start, end, travel_key=travel_key)
        self.mutations.append(
            Mutation(
                kind=MutationKind.CREATE_EVENT,
                event_id=created.id,
                title=title,
                start=start,
                end=end,
                travel_key=travel_key,
            )
        )
        return created
