"""Pytest fixtures for calendar-colorizer tests."""

from datetime import datetime, timedelta

import pytest

from calendar_colorizer.calendar.events import CalendarEvent, EventColor, GuestStatus
from calendar_colorizer.calendar.memory import InMemoryEventStore
from calendar_colorizer.config import ColorizerConfig
from calendar_colorizer.logging import reset_logging
from calendar_colorizer.routing.base import FixedDurationRouter

NOW = datetime(2025, 1, 10, 8, 0, 0)


def _make_event(
    *,
    id: str = "evt-1",
    title: str = "Test Event",
    location: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    color: EventColor | None = None,
    my_status: GuestStatus = GuestStatus.ACCEPTED,
    guests: list[str] | None = None,
    last_modified: datetime | None = None,
) -> CalendarEvent:
    """Factory function for creating test events."""
    if start is None:
        start = datetime(2025, 1, 10, 10, 0, 0)
    if end is None:
        end = start + timedelta(hours=1)
    return CalendarEvent(
        id=id,
        title=title,
        location=location,
        start=start,
        end=end,
        color=color,
        my_status=my_status,
        guests=guests or [],
        last_modified=last_modified or NOW - timedelta(days=1),
    )


@pytest.fixture
def make_event():
    """Factory for CalendarEvent instances with sensible defaults."""
    return _make_event


@pytest.fixture
def config() -> ColorizerConfig:
    """Default classification config with a home address."""
    return ColorizerConfig(home_address="1 Home Street, Springfield")


@pytest.fixture
def store() -> InMemoryEventStore:
    """Empty in-memory store with a fixed clock."""
    return InMemoryEventStore(clock=lambda: NOW)


@pytest.fixture
def router() -> FixedDurationRouter:
    """Router answering 20 minutes for every route."""
    return FixedDurationRouter(20)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()
