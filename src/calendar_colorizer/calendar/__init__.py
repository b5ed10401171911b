"""Calendar event model and event store backends."""

from calendar_colorizer.calendar.events import CalendarEvent, EventColor, GuestStatus
from calendar_colorizer.calendar.memory import InMemoryEventStore, load_events
from calendar_colorizer.calendar.store import EventStore

__all__ = [
    # Data classes
    "CalendarEvent",
    "EventColor",
    "GuestStatus",
    # Stores
    "EventStore",
    "InMemoryEventStore",
    "load_events",
]
