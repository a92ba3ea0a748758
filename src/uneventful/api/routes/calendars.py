"""Calendar list and calendar selection endpoints."""

from fastapi import APIRouter, Depends, Request

from uneventful.api.dependencies import get_workspace
from uneventful.api.logging import annotate_request
from uneventful.api.models.responses import CalendarResponse, CalendarsResponse
from uneventful.services.workspace import Workspace

router = APIRouter(prefix="/v1/calendars")


def build_calendars_response(workspace: Workspace) -> CalendarsResponse:
    counts = workspace.event_counts()
    selected = set(workspace.selected_calendar_ids)
    return CalendarsResponse(
        calendars=[
            CalendarResponse(
                id=calendar.id,
                name=calendar.display_name,
                color=calendar.background_color,
                primary=calendar.primary,
                selected=calendar.id in selected,
                event_count=counts.get(calendar.id),
                truncated=calendar.id in workspace.aggregate.truncated,
            )
            for calendar in workspace.calendars
        ]
    )


@router.get("", response_model=CalendarsResponse)
async def list_calendars(workspace: Workspace = Depends(get_workspace)):
    """List calendars, loading them on first use."""
    if not workspace.calendars:
        await workspace.load_calendars()
    return build_calendars_response(workspace)


@router.post("/reload", response_model=CalendarsResponse)
async def reload_calendars(workspace: Workspace = Depends(get_workspace)):
    """Re-fetch the calendar list. Clears the selection."""
    await workspace.load_calendars()
    return build_calendars_response(workspace)


@router.post("/{calendar_id}/toggle", response_model=CalendarsResponse)
async def toggle_calendar(
    request: Request,
    calendar_id: str,
    workspace: Workspace = Depends(get_workspace),
):
    """Add or remove a calendar from the aggregate. Clears the selection."""
    await workspace.toggle_calendar(calendar_id)
    annotate_request(request, calendars_requested=len(workspace.selected_calendar_ids))
    return build_calendars_response(workspace)
