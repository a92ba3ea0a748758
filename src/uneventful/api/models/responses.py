"""Pydantic response models for API endpoints."""

from datetime import date, datetime

from pydantic import BaseModel

from uneventful.models.events import CalendarEvent, EventTime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    oauth_configured: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    NETWORK_ERROR = "NETWORK_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    OPERATION_IN_PROGRESS = "OPERATION_IN_PROGRESS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SessionResponse(BaseModel):
    """Opaque session token handed to the browser."""

    session_token: str
    expires_at: datetime | None
    resumed: bool = False


class CalendarResponse(BaseModel):
    id: str
    name: str
    color: str | None = None
    primary: bool
    selected: bool
    event_count: int | None = None
    truncated: bool = False


class CalendarsResponse(BaseModel):
    calendars: list[CalendarResponse]


class EventTimeResponse(BaseModel):
    date_time: datetime | None = None
    day: date | None = None

    @classmethod
    def from_event_time(cls, value: EventTime) -> "EventTimeResponse":
        return cls(date_time=value.date_time, day=value.day)


class EventResponse(BaseModel):
    id: str
    calendar_id: str
    calendar_color: str | None = None
    summary: str
    description: str | None = None
    location: str | None = None
    start: EventTimeResponse
    end: EventTimeResponse
    all_day: bool
    selected: bool
    html_link: str | None = None

    @classmethod
    def from_event(cls, event: CalendarEvent, selected: bool) -> "EventResponse":
        return cls(
            id=event.id,
            calendar_id=event.calendar_id,
            calendar_color=event.calendar_color,
            summary=event.summary,
            description=event.description,
            location=event.location,
            start=EventTimeResponse.from_event_time(event.start),
            end=EventTimeResponse.from_event_time(event.end),
            all_day=event.start.is_all_day,
            selected=selected,
            html_link=event.html_link,
        )


class EventsResponse(BaseModel):
    """Filtered view of the aggregate plus selection state."""

    events: list[EventResponse]
    total: int  # events in the aggregate, before search
    selected_count: int
    time_min: datetime
    time_max: datetime | None
    query: str
    counts: dict[str, int]
    truncated_calendars: list[str]


class EventKeyModel(BaseModel):
    calendar_id: str
    event_id: str


class DeletionReportResponse(BaseModel):
    succeeded: int
    failed: int
    failed_events: list[EventKeyModel]
    partial: bool
    message: str
    stale: bool = False  # reload after delete failed; events list is out of date
