"""Routing services for travel time lookups."""

from calendar_colorizer.routing.base import FixedDurationRouter, RoutingService, TransportMode
from calendar_colorizer.routing.google_maps import GoogleMapsRouter

__all__ = [
    "FixedDurationRouter",
    "GoogleMapsRouter",
    "RoutingService",
    "TransportMode",
]
