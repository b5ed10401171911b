"""Base routing service interface and shared types."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)


class TransportMode(str, Enum):
    """Travel modes understood by routing services."""

    DRIVING = "driving"
    TRANSIT = "transit"
    WALKING = "walking"
    BICYCLING = "bicycling"


class RoutingService(ABC):
    """Abstract base class for travel time lookups."""

    @abstractmethod
    def find_route(
        self,
        origin: str,
        destination: str,
        mode: TransportMode,
        arrive_by: datetime,
    ) -> int | None:
        """
        Estimate how long it takes to get from origin to destination.

        Args:
            origin: Starting address.
            destination: Target address (the event location).
            mode: Means of transport.
            arrive_by: Desired arrival time.

        Returns:
            Travel duration in whole minutes, or None if no route was found.

        Raises:
            RoutingError: If the lookup itself failed.
        """
        ...


class FixedDurationRouter(RoutingService):
    """Router that answers every lookup with the same duration.

    Used for offline simulation and tests.
    """

    def __init__(self, minutes: int | None) -> None:
        self.minutes = minutes
        self.calls: list[tuple[str, str, TransportMode, datetime]] = []

    def find_route(
        self,
        origin: str,
        destination: str,
        mode: TransportMode,
        arrive_by: datetime,
    ) -> int | None:
        self.calls.append((origin, destination, mode, arrive_by))
        if not origin or not destination:
            return None
        logger.debug(f"Fixed route {origin} -> {destination} ({mode.value}): {self.minutes}m")
        return self.minutes
