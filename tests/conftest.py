"""
Pytest configuration and shared fixtures.
"""

import asyncio
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from uneventful.core.errors import AuthFailure, NetworkFailure, SessionExpired
from uneventful.core.tokens import TokenGrant
from uneventful.models.events import (
    Calendar,
    CalendarEvent,
    DeleteBatchResult,
    EventTime,
    TimeWindow,
)

NOW = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


def make_event(
    event_id: str,
    calendar_id: str = "primary@example.com",
    start: str = "2025-06-01T09:00:00+00:00",
    summary: str = "",
    description: str | None = None,
    location: str | None = None,
) -> CalendarEvent:
    """Build an event; a bare YYYY-MM-DD start makes it all-day."""
    if "T" in start:
        start_time = EventTime(date_time=datetime.fromisoformat(start))
        end_time = EventTime(date_time=datetime.fromisoformat(start) + timedelta(hours=1))
    else:
        start_time = EventTime(day=date.fromisoformat(start))
        end_time = EventTime(day=date.fromisoformat(start) + timedelta(days=1))
    return CalendarEvent(
        id=event_id,
        calendar_id=calendar_id,
        start=start_time,
        end=end_time,
        summary=summary,
        description=description,
        location=location,
    )


class FakeIssuer:
    """Token issuer that counts refreshes."""

    def __init__(self, reject: bool = False, fail: bool = False, lifetime: int = 3600):
        self.reject = reject
        self.fail = fail
        self.lifetime = lifetime
        self.refresh_calls = 0
        self.revoked: list[str] = []

    async def refresh(self, refresh_token: str) -> TokenGrant:
        self.refresh_calls += 1
        # Yield so concurrent callers can pile up behind the first refresh
        await asyncio.sleep(0)
        if self.reject:
            raise SessionExpired("invalid_grant")
        if self.fail:
            raise NetworkFailure("connection reset")
        return TokenGrant(
            access_token=f"access-{self.refresh_calls}",
            expires_at=NOW + timedelta(seconds=self.lifetime),
        )

    async def revoke(self, token: str) -> None:
        self.revoked.append(token)


class FakeCalendarService:
    """In-memory stand-in for CalendarService.

    ``fail_ids`` are refused on delete; calendars in ``auth_fail`` or
    ``network_fail`` raise on any call that touches them.
    """

    def __init__(self, calendars: list[Calendar], events: dict[str, list[CalendarEvent]]):
        self.calendars = calendars
        self.events = {calendar_id: list(items) for calendar_id, items in events.items()}
        self.fail_ids: set[str] = set()
        self.auth_fail: set[str] = set()
        self.network_fail: set[str] = set()
        self.list_calls: list[str] = []
        self.delete_calls: list[tuple[str, list[str]]] = []

    def _check(self, calendar_id: str) -> None:
        if calendar_id in self.auth_fail:
            raise AuthFailure("token revoked")
        if calendar_id in self.network_fail:
            raise NetworkFailure("timed out")

    async def list_calendars(self) -> list[Calendar]:
        return list(self.calendars)

    async def list_events(self, calendar_id: str, window: TimeWindow, limit: int = 100):
        self.list_calls.append(calendar_id)
        self._check(calendar_id)
        return list(self.events.get(calendar_id, []))[:limit]

    async def delete_events(self, calendar_id: str, event_ids: list[str]) -> DeleteBatchResult:
        self.delete_calls.append((calendar_id, list(event_ids)))
        self._check(calendar_id)
        succeeded = []
        failed = []
        for event_id in event_ids:
            if event_id in self.fail_ids:
                failed.append(event_id)
                continue
            self.events[calendar_id] = [e for e in self.events[calendar_id] if e.id != event_id]
            succeeded.append(event_id)
        return DeleteBatchResult(succeeded=tuple(succeeded), failed=tuple(failed))


@pytest.fixture
def calendars():
    """A primary calendar and a shared one."""
    return [
        Calendar(id="team@example.com", summary="Team", background_color="#ff0000"),
        Calendar(
            id="primary@example.com",
            summary="primary@example.com",
            summary_override="Me",
            background_color="#0000ff",
            primary=True,
            time_zone="UTC",
        ),
    ]


@pytest.fixture
def window():
    return TimeWindow(time_min=NOW, time_max=NOW + timedelta(days=14))


@pytest.fixture
def fake_service(calendars):
    """Two calendars whose events interleave in time."""
    return FakeCalendarService(
        calendars,
        {
            "primary@example.com": [
                make_event("a", "primary@example.com", "2025-06-01T09:00:00+00:00", "Standup"),
                make_event("b", "primary@example.com", "2025-06-03T09:00:00+00:00", "César review"),
            ],
            "team@example.com": [
                make_event("c", "team@example.com", "2025-06-02T10:00:00+00:00", "Planning"),
            ],
        },
    )
