"""Base event store interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from calendar_colorizer.calendar.events import CalendarEvent, EventColor


class EventStore(ABC):
    """Abstract base class for calendar backends.

    Implementations keep the passed CalendarEvent in sync with what they
    wrote, so later rules in the same pass see the new title or color.
    """

    @abstractmethod
    def list_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """
        Get the event instances overlapping a time window.

        Raises:
            EventStoreError: If the calendar could not be read.
        """
        ...

    @abstractmethod
    def set_color(self, event: CalendarEvent, color: EventColor) -> None:
        """Change the color of an event."""
        ...

    @abstractmethod
    def set_title(self, event: CalendarEvent, title: str) -> None:
        """Change the title of an event."""
        ...

    @abstractmethod
    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        travel_key: str | None = None,
    ) -> CalendarEvent:
        """
        Create a new event.

        Args:
            title: Event title.
            start: Event start.
            end: Event end.
            travel_key: Stable tag identifying a synthesized travel event.

        Returns:
            The created event.

        Raises:
            EventStoreError: If the event could not be created.
        """
        ...

    @abstractmethod
    def find_by_travel_key(self, travel_key: str) -> CalendarEvent | None:
        """Look up a previously synthesized travel event by its tag."""
        ...
