"""API route modules."""

from .calendars import router as calendars_router
from .events import router as events_router
from .health import router as health_router
from .selection import router as selection_router
from .session import router as session_router

__all__ = [
    "calendars_router",
    "events_router",
    "health_router",
    "selection_router",
    "session_router",
]
