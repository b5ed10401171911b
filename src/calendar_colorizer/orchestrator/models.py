"""Data models for colorizing runs."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from calendar_colorizer.calendar.events import EventColor


class RunMode(str, Enum):
    """Why a run was started."""

    CHANGE_NOTIFICATION = "change_notification"  # only the latest modified event
    SCHEDULED = "scheduled"  # every event in the window


class ProcessResult(BaseModel):
    """Result of processing a single event."""

    event_id: str = Field(description="Calendar event ID")
    title: str = Field(default="", description="Event title when it was processed")
    success: bool = Field(default=True, description="Whether processing succeeded")
    skipped: bool = Field(default=False, description="Whether the skip filter applied")
    color: EventColor | None = Field(default=None, description="Color after processing")
    rule_matched: str | None = Field(default=None, description="Terminal rule that matched")
    colored: bool = Field(default=False, description="Whether a color was written")
    changes: list[str] = Field(default_factory=list, description="Writes made, in order")
    touched_ids: list[str] = Field(
        default_factory=list, description="Events written to or created, in order"
    )
    travel_events_created: int = Field(default=0, description="Travel events created")
    error: str | None = Field(default=None, description="Error message if failed")


class RunResult(BaseModel):
    """Summary of a colorizing run."""

    mode: RunMode
    started_at: datetime = Field(description="When run started")
    completed_at: datetime = Field(description="When run completed")
    events_fetched: int = Field(default=0, description="Events in the window")
    events_processed: int = Field(default=0, description="Events run through the rules")
    events_skipped: int = Field(default=0, description="Events left alone by the skip filter")
    events_colored: int = Field(default=0, description="Events whose color was written")
    travel_events_created: int = Field(default=0, description="Travel events created")
    errors: int = Field(default=0, description="Processing errors")
    dry_run: bool = Field(default=False, description="Was this a dry run")
    results: list[ProcessResult] = Field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        """Get run duration in seconds."""
        return (self.completed_at - self.started_at).total_seconds()
