"""Google Maps Directions routing service."""

import logging
from datetime import datetime

import googlemaps
from googlemaps.exceptions import ApiError, HTTPError, Timeout, TransportError

from calendar_colorizer.errors import RoutingError
from calendar_colorizer.routing.base import RoutingService, TransportMode

logger = logging.getLogger(__name__)


class GoogleMapsRouter(RoutingService):
    """Travel times from the Google Maps Directions API."""

    def __init__(self, api_key: str | None = None, client: googlemaps.Client | None = None) -> None:
        """
        Initialize the router.

        Args:
            api_key: Directions API key. Ignored when a client is given.
            client: Preconfigured googlemaps client.
        """
        if client is None:
            if not api_key:
                raise RoutingError("Google Maps API key is not configured")
            client = googlemaps.Client(key=api_key)
        self.client = client

    def find_route(
        self,
        origin: str,
        destination: str,
        mode: TransportMode,
        arrive_by: datetime,
    ) -> int | None:
        if not origin or not destination:
            logger.warning("Route lookup without origin or destination, skipping")
            return None

        # The Directions API honours arrival_time for transit requests only
        options = {"arrival_time": arrive_by} if mode is TransportMode.TRANSIT else {}
        try:
            routes = self.client.directions(origin, destination, mode=mode.value, **options)
        except (ApiError, HTTPError, Timeout, TransportError) as e:
            raise RoutingError(f"Directions lookup failed: {e}", origin, destination) from e

        if not routes:
            logger.info(f"No {mode.value} route found to {destination}")
            return None

        legs = routes[0].get("legs") or []
        seconds = legs[0].get("duration", {}).get("value") if legs else None
        if seconds is None:
            logger.info(f"Route to {destination} has no duration")
            return None
        return round(seconds / 60)
