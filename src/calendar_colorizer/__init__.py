"""Rule-based color tagging and travel-time blocks for calendar events."""

__version__ = "0.3.0"
