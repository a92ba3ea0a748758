"""
Bulk delete across calendars with partial-failure accounting.
"""

import logging
from collections.abc import Iterable

from uneventful.models.events import Aggregate, DeletionReport, EventKey
from uneventful.services.calendar import CalendarService

logger = logging.getLogger(__name__)


def partition_by_calendar(selected: Iterable[EventKey], aggregate: Aggregate) -> dict[str, list[str]]:
    """
    Group selected keys by owning calendar.

    Keys that are not in the aggregate cannot be resolved to a calendar and
    are dropped, not counted as failures.
    """
    present = aggregate.keys()
    by_calendar: dict[str, list[str]] = {}
    for key in sorted(selected):
        if key not in present:
            logger.debug("Dropping stale selection %s", key)
            continue
        by_calendar.setdefault(key.calendar_id, []).append(key.event_id)
    return by_calendar


class DeletionOrchestrator:
    """Runs one delete batch per calendar and sums the outcomes."""

    def __init__(self, service: CalendarService) -> None:
        self._service = service

    async def delete(self, selected: Iterable[EventKey], aggregate: Aggregate) -> DeletionReport:
        """
        Delete the selected events.

        Batches run one calendar at a time. An AuthFailure from any batch is
        raised immediately and the remaining calendars are not attempted.
        """
        report = DeletionReport()
        for calendar_id, event_ids in partition_by_calendar(selected, aggregate).items():
            batch = await self._service.delete_events(calendar_id, event_ids)
            report.add_batch(calendar_id, batch)

        logger.info("Bulk delete finished: %d succeeded, %d failed", report.succeeded, report.failed)
        return report
