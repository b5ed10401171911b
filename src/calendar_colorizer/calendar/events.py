"""Calendar event model shared by stores, rules and the orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EventColor(str, Enum):
    """Color categories written by the classifier.

    The values are stable identifiers; the concrete color shown by a calendar
    is looked up through the configured palette.
    """

    DEFAULT = "default"
    TENTATIVE = "tentative"
    EXTERNAL = "external"
    ONE_ON_ONE = "one_on_one"
    GROUP_MEETING = "group_meeting"
    INTERVIEW = "interview"


class GuestStatus(str, Enum):
    """The calendar owner's response to an event."""

    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"
    UNKNOWN = "unknown"  # invited, not answered yet
    NOT_APPLICABLE = "not_applicable"  # owner's own event


@dataclass
class CalendarEvent:
    """Represents one (already expanded) event instance."""

    id: str
    title: str
    start: datetime
    end: datetime
    location: str | None = None
    color: EventColor | None = None
    my_status: GuestStatus = GuestStatus.NOT_APPLICABLE
    guests: list[str] = field(default_factory=list)
    last_modified: datetime | None = None
    travel_key: str | None = None  # set on synthesized travel events

    @property
    def is_travel_event(self) -> bool:
        return self.travel_key is not None

    def __str__(self) -> str:
        return f"{self.start.strftime('%Y-%m-%d %H:%M')}: {self.title}"
