"""Travel time blocks around in-person events."""

import logging
from datetime import timedelta
from typing import NamedTuple

from calendar_colorizer.calendar.events import CalendarEvent
from calendar_colorizer.calendar.store import EventStore
from calendar_colorizer.calendar.writer import EventWriter
from calendar_colorizer.config import ColorizerConfig
from calendar_colorizer.errors import EventStoreError, RoutingError
from calendar_colorizer.routing.base import RoutingService, TransportMode


class TravelEvents(NamedTuple):
    """The two companion events of an anchor event."""

    travel_to: CalendarEvent
    travel_back: CalendarEvent
    travel_minutes: int


def travel_key(anchor: CalendarEvent, direction: str) -> str:
    """Stable tag of the travel event leading to ("to") or from ("back") an anchor."""
    return f"{anchor.id}:{direction}"


class TravelSynthesizer:
    """Creates travel events before and after events with a transport marker."""

    def __init__(
        self,
        store: EventStore,
        router: RoutingService | None,
        config: ColorizerConfig,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the synthesizer.

        Args:
            store: Where travel events are created.
            router: Travel time lookups. None disables synthesis.
            config: Markers, padding and home address.
            logger: Logger for the activity trace.
        """
        self.store = store
        self.router = router
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def resolve_mode(self, marker: str | None) -> TransportMode:
        """Map a transport glyph to a mode; no glyph means the default transport."""
        return self.config.transports[marker or self.config.default_transport]

    def travel_time(self, event: CalendarEvent, mode: TransportMode) -> int | None:
        """
        Look up the travel time from home to the event, arriving at its start.

        Returns:
            Minutes, or None if there is no home address, no route, or the
            lookup failed for any reason.
        """
        if not self.config.home_address:
            self.logger.warning("No home address configured, skipping travel time")
            return None
        if self.router is None:
            self.logger.warning("No routing service configured, skipping travel time")
            return None

        try:
            return self.router.find_route(
                self.config.home_address,
                event.location or "",
                mode,
                event.start,
            )
        except RoutingError as e:
            self.logger.warning(f"Travel time lookup to {event.location} failed: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Unexpected error looking up travel time to {event.location}: {e}")
            return None

    def synthesize(
        self,
        event: CalendarEvent,
        marker: str | None = None,
        *,
        writer: EventWriter | None = None,
    ) -> TravelEvents | None:
        """
        Create the travel events of an anchor event and strip its marker.

        The return trip reuses the duration of the trip there. If the route
        lookup fails nothing is written. If the second creation fails the
        first travel event stays in the calendar.

        Args:
            event: The anchor event.
            marker: Transport glyph prefixing the title.
            writer: Writer to record (and, unless dry-running, apply) writes.

        Returns:
            The created travel events, or None if nothing was synthesized.
        """
        writer = writer or EventWriter(self.store)
        glyph = marker or self.config.default_transport
        self.logger.info(f"Transport is: {glyph}")

        minutes = self.travel_time(event, self.resolve_mode(marker))
        if minutes is None:
            return None
        self.logger.info(f"Travel time to {event.location}: {minutes}")

        padded = timedelta(minutes=minutes + self.config.transport_padding_minutes)
        title = self.config.travel_title(glyph)

        try:
            travel_to = self._existing(event, "to") or writer.create_event(
                title, event.start - padded, event.start, travel_key=travel_key(event, "to")
            )
        except EventStoreError as e:
            self.logger.error(f"Could not create travel event before {event.title}: {e}")
            return None

        try:
            travel_back = self._existing(event, "back") or writer.create_event(
                title, event.end, event.end + padded, travel_key=travel_key(event, "back")
            )
        except EventStoreError as e:
            self.logger.error(
                f"Could not create travel event after {event.title}, "
                f"leaving orphaned travel event {travel_to.id}: {e}"
            )
            return None

        if marker and (event.title or "").startswith(marker):
            try:
                writer.set_title(event, event.title[len(marker):])
            except EventStoreError as e:
                self.logger.error(f"Could not remove transport marker from {event.title}: {e}")

        return TravelEvents(travel_to, travel_back, minutes)

    def _existing(self, event: CalendarEvent, direction: str) -> CalendarEvent | None:
        if not self.config.dedupe_travel_events:
            return None
        found = self.store.find_by_travel_key(travel_key(event, direction))
        if found is not None:
            self.logger.info(f"Travel event {direction} for {event.title} already exists")
        return found
