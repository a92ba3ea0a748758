"""API Pydantic models."""

from .requests import SearchRequest, SessionCreateRequest, WindowRequest
from .responses import (
    CalendarResponse,
    CalendarsResponse,
    DeletionReportResponse,
    ErrorCodes,
    ErrorResponse,
    EventKeyModel,
    EventResponse,
    EventsResponse,
    HealthResponse,
    SessionResponse,
)

__all__ = [
    "CalendarResponse",
    "CalendarsResponse",
    "DeletionReportResponse",
    "ErrorCodes",
    "ErrorResponse",
    "EventKeyModel",
    "EventResponse",
    "EventsResponse",
    "HealthResponse",
    "SearchRequest",
    "SessionCreateRequest",
    "SessionResponse",
    "WindowRequest",
]
