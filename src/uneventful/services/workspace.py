"""
Per-session orchestration state: calendars, window, search, aggregate, selection.

The workspace is the one owner of the selection and the aggregate. Derived
views (filtered events, counts) are recomputed from them on demand.
"""

import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo

from uneventful.core.config import DEFAULT_TIMEZONE, DEFAULT_WINDOW_DAYS
from uneventful.core.errors import (
    NetworkFailure,
    OperationInProgress,
    ProviderError,
    ValidationFailure,
)
from uneventful.models.events import (
    Aggregate,
    Calendar,
    CalendarEvent,
    DeletionReport,
    EventKey,
    TimeWindow,
)
from uneventful.services.aggregator import CalendarAggregator
from uneventful.services.calendar import CalendarService
from uneventful.services.deletion import DeletionOrchestrator
from uneventful.services.filtering import filter_events
from uneventful.services.selection import SelectionModel

logger = logging.getLogger(__name__)


def sort_calendars(calendars: list[Calendar]) -> list[Calendar]:
    """Primary calendar first, then alphabetically by display name."""
    return sorted(calendars, key=lambda c: (not c.primary, c.display_name.casefold()))


def default_selection(calendars: list[Calendar]) -> tuple[str, ...]:
    """The primary calendar, else the first one, else nothing."""
    for calendar in calendars:
        if calendar.primary:
            return (calendar.id,)
    return (calendars[0].id,) if calendars else ()


def validate_window(window: TimeWindow) -> TimeWindow:
    if window.time_max is not None and window.time_max <= window.time_min:
        raise ValidationFailure("time_max must be after time_min")
    return window


class Workspace:
    """Everything one signed-in user is looking at and has marked."""

    def __init__(
        self,
        service: CalendarService,
        *,
        aggregator: CalendarAggregator | None = None,
        orchestrator: DeletionOrchestrator | None = None,
        window: TimeWindow | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._service = service
        self._aggregator = aggregator or CalendarAggregator(service)
        self._orchestrator = orchestrator or DeletionOrchestrator(service)
        self.calendars: list[Calendar] = []
        self.selected_calendar_ids: tuple[str, ...] = ()
        self.window = window or TimeWindow.starting_today(
            DEFAULT_WINDOW_DAYS, tz or ZoneInfo(DEFAULT_TIMEZONE)
        )
        self.query = ""
        self.aggregate = Aggregate(window=self.window)
        self.selection = SelectionModel()
        self.deleting = False

    # -------------------------------------------------------------------------
    # Calendars and window (both rebuild the aggregate and clear the selection)
    # -------------------------------------------------------------------------

    async def load_calendars(self) -> list[Calendar]:
        """Fetch the calendar list, keep or pick the selected calendars, load events."""
        calendars = sort_calendars(await self._service.list_calendars())
        self.calendars = calendars
        known = {calendar.id for calendar in calendars}
        kept = tuple(cid for cid in self.selected_calendar_ids if cid in known)
        await self.reload_events(
            calendar_ids=kept or default_selection(calendars), clear_selection=True
        )
        return calendars

    async def toggle_calendar(self, calendar_id: str) -> None:
        if calendar_id not in {calendar.id for calendar in self.calendars}:
            raise ValidationFailure(f"Unknown calendar: {calendar_id}")

        if calendar_id in self.selected_calendar_ids:
            selected = tuple(cid for cid in self.selected_calendar_ids if cid != calendar_id)
        else:
            selected = self.selected_calendar_ids + (calendar_id,)
        await self.reload_events(calendar_ids=selected, clear_selection=True)

    async def set_window(self, window: TimeWindow) -> None:
        validate_window(window)
        await self.reload_events(window=window, clear_selection=True)

    async def refresh(self) -> None:
        """User-requested reload. Starts over with nothing marked."""
        await self.reload_events(clear_selection=True)

    async def reload_events(
        self,
        calendar_ids: tuple[str, ...] | None = None,
        window: TimeWindow | None = None,
        clear_selection: bool = False,
    ) -> Aggregate:
        """
        Rebuild the aggregate, optionally for new calendars or a new window.

        The new calendars and window are only committed once every fetch
        succeeded. On failure the previous state, selection included, is kept
        as-is.
        """
        if calendar_ids is None:
            calendar_ids = self.selected_calendar_ids
        if window is None:
            window = self.window

        aggregate = await self._aggregator.build(self.selected_calendars(calendar_ids), window)
        self.selected_calendar_ids = calendar_ids
        self.window = window
        self.aggregate = aggregate
        if clear_selection:
            self.selection.clear()
        else:
            self.selection.prune(aggregate.keys())
        return aggregate

    def selected_calendars(self, calendar_ids: tuple[str, ...] | None = None) -> list[Calendar]:
        # Calendar list order, not click order
        selected = set(self.selected_calendar_ids if calendar_ids is None else calendar_ids)
        return [calendar for calendar in self.calendars if calendar.id in selected]

    async def same_account(self) -> bool:
        """Whether the signed-in account still owns the primary calendar loaded here."""
        primary = next((calendar.id for calendar in self.calendars if calendar.primary), None)
        if primary is None:
            return True
        calendars = await self._service.list_calendars()
        return any(calendar.primary and calendar.id == primary for calendar in calendars)

    def reset(self) -> None:
        """Forget calendars, search and marks. The next load starts from defaults."""
        self.calendars = []
        self.selected_calendar_ids = ()
        self.query = ""
        self.aggregate = Aggregate(window=self.window)
        self.selection.clear()

    # -------------------------------------------------------------------------
    # Search and selection
    # -------------------------------------------------------------------------

    def set_query(self, query: str) -> None:
        self.query = query

    def visible_events(self) -> list[CalendarEvent]:
        return filter_events(self.aggregate.events, self.query)

    def event_counts(self) -> dict[str, int]:
        return self.aggregate.counts_by_calendar()

    def toggle_event(self, key: EventKey) -> None:
        self.selection.toggle(key)

    def select_all(self) -> None:
        self.selection.select_all(event.key for event in self.visible_events())

    def clear_selection(self) -> None:
        self.selection.clear()

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    async def delete_selected(self) -> tuple[DeletionReport, bool]:
        """
        Delete everything marked and reload.

        Returns the report and whether the reload succeeded. An AuthFailure
        propagates before the selection is touched, so the marks survive
        re-authentication.
        """
        if self.deleting:
            raise OperationInProgress("A delete is already running")

        self.deleting = True
        try:
            report = await self._orchestrator.delete(self.selection.selected, self.aggregate)
        finally:
            self.deleting = False

        self.selection.clear()
        try:
            await self.reload_events()
        except (NetworkFailure, ProviderError) as e:
            logger.warning("Reload after delete failed; showing stale events: %s", e)
            return report, False
        return report, True
