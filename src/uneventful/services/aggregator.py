"""
Merge per-calendar event fetches into one time-ordered aggregate.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from uneventful.core.config import DEFAULT_TIMEZONE, EVENTS_PAGE_LIMIT
from uneventful.core.errors import AuthFailure
from uneventful.models.events import Aggregate, Calendar, CalendarEvent, TimeWindow
from uneventful.services.calendar import CalendarService

logger = logging.getLogger(__name__)


def calendar_tz(calendar: Calendar, default: str = DEFAULT_TIMEZONE) -> tzinfo:
    """Time zone used to place a calendar's all-day events on the timeline."""
    for name in (calendar.time_zone, default):
        if not name:
            continue
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("Unknown time zone %r for calendar %s", name, calendar.id)
    return timezone.utc


def tag_events(calendar: Calendar, events: Sequence[CalendarEvent]) -> list[CalendarEvent]:
    """Stamp each event with its owning calendar's id and color."""
    return [
        replace(event, calendar_id=calendar.id, calendar_color=calendar.background_color)
        for event in events
    ]


def merge_events(batches: Sequence[tuple[Calendar, Sequence[CalendarEvent]]]) -> list[CalendarEvent]:
    """
    Tag and merge per-calendar event lists into one list sorted by start.

    The sort is stable, so events with equal starts keep their input order
    (calendar order first, then provider order).
    """
    keyed = []
    for calendar, events in batches:
        tz = calendar_tz(calendar)
        for event in tag_events(calendar, events):
            keyed.append((event.start.sort_key(tz), event))
    keyed.sort(key=lambda pair: pair[0])
    return [event for _, event in keyed]


class CalendarAggregator:
    """Builds the working set of events for the selected calendars."""

    def __init__(self, service: CalendarService, limit: int = EVENTS_PAGE_LIMIT) -> None:
        self._service = service
        self._limit = limit

    async def build(self, calendars: Sequence[Calendar], window: TimeWindow) -> Aggregate:
        """
        Fetch every calendar over ``window`` and merge the results.

        Raises the first error encountered in calendar order, except that an
        AuthFailure anywhere wins over other errors. No partial aggregate is
        ever returned.
        """
        if not calendars:
            return Aggregate(window=window)

        results = await asyncio.gather(
            *(self._service.list_events(calendar.id, window, self._limit) for calendar in calendars),
            return_exceptions=True,
        )

        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            auth_errors = [error for error in errors if isinstance(error, AuthFailure)]
            raise (auth_errors or errors)[0]

        batches = list(zip(calendars, results))
        truncated = frozenset(
            calendar.id for calendar, events in batches if len(events) >= self._limit
        )
        if truncated:
            logger.info("Event fetch hit the %d-event limit for %s", self._limit, sorted(truncated))

        return Aggregate(
            events=tuple(merge_events(batches)),
            calendar_ids=tuple(calendar.id for calendar in calendars),
            window=window,
            truncated=truncated,
        )
