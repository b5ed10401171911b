"""Google Calendar API event store.

We keep OAuth handling next to the store so the calendar scope and token file
stay independent of anything else using Google APIs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from calendar_colorizer.calendar.events import CalendarEvent, EventColor, GuestStatus
from calendar_colorizer.calendar.store import EventStore
from calendar_colorizer.errors import EventStoreError

logger = logging.getLogger(__name__)

CALENDAR_SCOPE_EVENTS = "https://www.googleapis.com/auth/calendar.events"

# Private extended property holding the travel key of synthesized events
TRAVEL_KEY_PROPERTY = "calendarColorizerTravelKey"

_RESPONSE_STATUS = {
    "accepted": GuestStatus.ACCEPTED,
    "declined": GuestStatus.DECLINED,
    "tentative": GuestStatus.TENTATIVE,
    "needsAction": GuestStatus.UNKNOWN,
}


def get_calendar_service(
    *,
    credentials_path: Path,
    token_path: Path,
    scopes: Sequence[str] | None = None,
    allow_interactive: bool = True,
):
    """Create an authenticated Google Calendar API service.

    Args:
        credentials_path: Path to OAuth client credentials JSON.
        token_path: Path to token JSON used to store the refresh token.
        scopes: OAuth scopes to request. Defaults to calendar.events.
        allow_interactive: If False, never start the browser OAuth flow.

    Returns:
        googleapiclient service for calendar v3.

    Raises:
        EventStoreError: If interactive auth is required but disabled.
    """
    scopes = list(scopes or [CALENDAR_SCOPE_EVENTS])

    creds: Credentials | None = None
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), scopes)

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())

    if not creds or not creds.valid:
        if not allow_interactive:
            raise EventStoreError(
                "Calendar credentials are missing or invalid and interactive auth is disabled. "
                "Run 'calendar-colorizer run' once from a terminal to authorize.",
                operation="authorize",
            )

        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes)
        creds = flow.run_local_server(port=0)

        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json(), encoding="utf-8")

    return build("calendar", "v3", credentials=creds, cache_discovery=False)


class GoogleCalendarStore(EventStore):
    """Event store for one Google calendar."""

    def __init__(
        self,
        service: Any,
        calendar_id: str = "primary",
        palette: Mapping[EventColor, str] | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            service: Authenticated calendar v3 service.
            calendar_id: Calendar to read and write.
            palette: Color category -> Google colorId.
        """
        from calendar_colorizer.config import DEFAULT_PALETTE

        self.service = service
        self.calendar_id = calendar_id
        self.palette = dict(palette or DEFAULT_PALETTE)
        self._categories = {color_id: color for color, color_id in self.palette.items()}

    def _execute(self, request: Any, operation: str) -> dict[str, Any]:
        try:
            return request.execute()
        except HttpError as e:
            raise EventStoreError(f"Google Calendar {operation} failed: {e}", operation) from e

    def list_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        events: list[CalendarEvent] = []
        page_token: str | None = None
        while True:
            response = self._execute(
                self.service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=_rfc3339(start),
                    timeMax=_rfc3339(end),
                    singleEvents=True,
                    showDeleted=False,
                    pageToken=page_token,
                ),
                "list_events",
            )
            events.extend(self._to_event(item) for item in response.get("items", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        logger.debug(f"Fetched {len(events)} event(s) from {self.calendar_id}")
        return events

    def set_color(self, event: CalendarEvent, color: EventColor) -> None:
        self._patch(event, {"colorId": self.palette[color]}, "set_color")
        event.color = color

    def set_title(self, event: CalendarEvent, title: str) -> None:
        self._patch(event, {"summary": title}, "set_title")
        event.title = title

    def _patch(self, event: CalendarEvent, body: dict[str, Any], operation: str) -> None:
        item = self._execute(
            self.service.events().patch(
                calendarId=self.calendar_id, eventId=event.id, body=body
            ),
            operation,
        )
        if item.get("updated"):
            event.last_modified = _parse_timestamp(item["updated"])

    def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        travel_key: str | None = None,
    ) -> CalendarEvent:
        body: dict[str, Any] = {
            "summary": title,
            "start": {"dateTime": _rfc3339(start)},
            "end": {"dateTime": _rfc3339(end)},
        }
        if travel_key:
            body["extendedProperties"] = {"private": {TRAVEL_KEY_PROPERTY: travel_key}}

        item = self._execute(
            self.service.events().insert(calendarId=self.calendar_id, body=body),
            "create_event",
        )
        return self._to_event(item)

    def find_by_travel_key(self, travel_key: str) -> CalendarEvent | None:
        response = self._execute(
            self.service.events().list(
                calendarId=self.calendar_id,
                privateExtendedProperty=f"{TRAVEL_KEY_PROPERTY}={travel_key}",
                maxResults=1,
            ),
            "find_by_travel_key",
        )
        items = response.get("items", [])
        return self._to_event(items[0]) if items else None

    def _to_event(self, item: dict[str, Any]) -> CalendarEvent:
        """Convert a Calendar API resource into a CalendarEvent."""
        attendees = item.get("attendees", [])
        me = next((a for a in attendees if a.get("self")), None)
        if me is not None:
            my_status = _RESPONSE_STATUS.get(me.get("responseStatus", ""), GuestStatus.UNKNOWN)
        elif "organizer" not in item or item["organizer"].get("self", False):
            my_status = GuestStatus.NOT_APPLICABLE
        else:
            my_status = GuestStatus.UNKNOWN

        color_id = item.get("colorId")
        if color_id is None:
            color = None
        else:
            # A colorId outside the palette was picked by hand; treat it as set
            color = self._categories.get(color_id, EventColor.DEFAULT)

        private = item.get("extendedProperties", {}).get("private", {})

        return CalendarEvent(
            id=item["id"],
            title=item.get("summary", ""),
            start=_parse_when(item["start"]),
            end=_parse_when(item["end"]),
            location=item.get("location") or None,
            color=color,
            my_status=my_status,
            guests=[
                a.get("email", "")
                for a in attendees
                if not a.get("self") and not a.get("resource")
            ],
            last_modified=_parse_timestamp(item["updated"]) if item.get("updated") else None,
            travel_key=private.get(TRAVEL_KEY_PROPERTY),
        )


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat()


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _parse_when(when: dict[str, str]) -> datetime:
    """Parse an event start/end; all-day events only carry a date."""
    if "dateTime" in when:
        return datetime.fromisoformat(when["dateTime"])
    return datetime.fromisoformat(when["date"]).astimezone()
