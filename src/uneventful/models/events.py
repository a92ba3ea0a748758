"""
Data models for calendars, events and deletion results.

Frozen dataclasses: a fetched calendar or event never changes in place, it is
replaced by the next fetch.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import NamedTuple


@dataclass(frozen=True)
class Calendar:
    """Calendar list entry."""

    id: str
    summary: str
    summary_override: str | None = None
    background_color: str | None = None
    primary: bool = False
    time_zone: str | None = None
    access_role: str | None = None

    @property
    def display_name(self) -> str:
        # The user's own name for a shared calendar wins
        return self.summary_override or self.summary or ""


@dataclass(frozen=True)
class EventTime:
    """Either a timestamp or an all-day date, as the provider reports it."""

    date_time: datetime | None = None
    day: date | None = None

    @property
    def is_all_day(self) -> bool:
        return self.date_time is None and self.day is not None

    def sort_key(self, tz: tzinfo = timezone.utc) -> datetime:
        """Comparable instant. All-day dates count as midnight in ``tz``."""
        if self.date_time is not None:
            if self.date_time.tzinfo is None:
                return self.date_time.replace(tzinfo=tz)
            return self.date_time
        if self.day is not None:
            return datetime.combine(self.day, time.min, tzinfo=tz)
        return datetime.min.replace(tzinfo=timezone.utc)


class EventKey(NamedTuple):
    """Event ids are only unique within their calendar."""

    calendar_id: str
    event_id: str


@dataclass(frozen=True)
class CalendarEvent:
    """Calendar event tagged with its owning calendar."""

    id: str
    calendar_id: str
    start: EventTime
    end: EventTime
    summary: str = ""
    description: str | None = None
    location: str | None = None
    calendar_color: str | None = None
    html_link: str | None = None
    recurring_event_id: str | None = None

    @property
    def key(self) -> EventKey:
        return EventKey(self.calendar_id, self.id)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[time_min, time_max)``. No ``time_max`` means unbounded."""

    time_min: datetime
    time_max: datetime | None = None

    @classmethod
    def starting_today(cls, days: int, tz: tzinfo) -> "TimeWindow":
        today = datetime.now(tz).date()
        start = datetime.combine(today, time.min, tzinfo=tz)
        return cls(time_min=start, time_max=start + timedelta(days=days))


@dataclass(frozen=True)
class Aggregate:
    """Time-ordered events of the selected calendars over one window.

    Rebuilt wholesale on every calendar or window change, never patched.
    """

    events: tuple[CalendarEvent, ...] = ()
    calendar_ids: tuple[str, ...] = ()
    window: TimeWindow | None = None
    # Calendars whose fetch hit the page limit, so more events may exist
    truncated: frozenset[str] = frozenset()

    def __len__(self) -> int:
        return len(self.events)

    def keys(self) -> frozenset[EventKey]:
        return frozenset(event.key for event in self.events)

    def get(self, key: EventKey) -> CalendarEvent | None:
        for event in self.events:
            if event.key == key:
                return event
        return None

    def counts_by_calendar(self) -> dict[str, int]:
        """Number of events per calendar, zero for calendars with none."""
        counts = {calendar_id: 0 for calendar_id in self.calendar_ids}
        for event in self.events:
            counts[event.calendar_id] = counts.get(event.calendar_id, 0) + 1
        return counts


@dataclass(frozen=True)
class DeleteBatchResult:
    """Per-id outcome of deleting a batch from one calendar."""

    succeeded: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


@dataclass
class DeletionReport:
    """Totals for one bulk delete across calendars."""

    succeeded: int = 0
    failed: int = 0
    failed_ids: set[EventKey] = field(default_factory=set)

    @property
    def partial(self) -> bool:
        return self.succeeded > 0 and self.failed > 0

    def add_batch(self, calendar_id: str, batch: DeleteBatchResult) -> None:
        self.succeeded += len(batch.succeeded)
        self.failed += len(batch.failed)
        self.failed_ids.update(EventKey(calendar_id, event_id) for event_id in batch.failed)

    @property
    def message(self) -> str:
        if self.failed:
            return (
                f"Deleted {self.succeeded} event(s). "
                f"Failed to delete {self.failed} event(s)."
            )
        return f"Successfully deleted {self.succeeded} event(s)"
