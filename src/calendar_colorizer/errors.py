"""Error classes for calendar and routing integrations."""


class ColorizerError(Exception):
    """Base class for calendar-colorizer errors."""


class EventStoreError(ColorizerError):
    """Raised when a calendar read or write fails."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class RoutingError(ColorizerError):
    """Raised when a travel time lookup fails."""

    def __init__(
        self,
        message: str,
        origin: str | None = None,
        destination: str | None = None,
    ) -> None:
        super().__init__(message)
        self.origin = origin
        self.destination = destination
