"""Cheap pre-check that spares already handled events from classification."""

import logging

from calendar_colorizer.calendar.events import CalendarEvent, EventColor, GuestStatus

_logger = logging.getLogger(__name__)


def should_skip(event: CalendarEvent, logger: logging.Logger | None = None) -> bool:
    """
    Check if an event can be left alone.

    Events that already carry a color other than Tentative (set by us or by
    hand) and events the user declined are skipped. Tentative events are
    always re-evaluated, since the tentative marker may have been removed.

    Args:
        event: The event to check.
        logger: Logger for the debug trace.

    Returns:
        True if the event should not be classified.
    """
    colored = event.color is not None and event.color != EventColor.TENTATIVE
    if colored or event.my_status == GuestStatus.DECLINED:
        (logger or _logger).debug(f"Skipping already colored / declined event: {event.title}")
        return True
    return False
