"""Event list, window, search, refresh and bulk delete endpoints."""

from fastapi import APIRouter, Depends, Request

from uneventful.api.dependencies import get_workspace
from uneventful.api.logging import annotate_request
from uneventful.api.models.requests import SearchRequest, WindowRequest
from uneventful.api.models.responses import (
    DeletionReportResponse,
    EventKeyModel,
    EventResponse,
    EventsResponse,
)
from uneventful.services.workspace import Workspace

router = APIRouter(prefix="/v1/events")


def build_events_response(workspace: Workspace) -> EventsResponse:
    """Render the filtered view of the workspace's aggregate."""
    selected = workspace.selection.selected
    aggregate = workspace.aggregate
    return EventsResponse(
        events=[
            EventResponse.from_event(event, selected=event.key in selected)
            for event in workspace.visible_events()
        ],
        total=len(aggregate),
        selected_count=len(selected),
        time_min=workspace.window.time_min,
        time_max=workspace.window.time_max,
        query=workspace.query,
        counts=workspace.event_counts(),
        truncated_calendars=sorted(aggregate.truncated),
    )


@router.get("", response_model=EventsResponse)
async def list_events(workspace: Workspace = Depends(get_workspace)):
    """Current filtered events, loading calendars on first use."""
    if not workspace.calendars:
        await workspace.load_calendars()
    return build_events_response(workspace)


@router.put("/window", response_model=EventsResponse)
async def set_window(body: WindowRequest, workspace: Workspace = Depends(get_workspace)):
    """Change the date range. Clears the selection."""
    await workspace.set_window(body.to_window())
    return build_events_response(workspace)


@router.put("/search", response_model=EventsResponse)
async def set_search(body: SearchRequest, workspace: Workspace = Depends(get_workspace)):
    """Change the search text. The selection is kept."""
    workspace.set_query(body.query)
    return build_events_response(workspace)


@router.post("/refresh", response_model=EventsResponse)
async def refresh_events(workspace: Workspace = Depends(get_workspace)):
    """Re-fetch events for the selected calendars. Clears the selection."""
    await workspace.refresh()
    return build_events_response(workspace)


@router.post("/delete", response_model=DeletionReportResponse)
async def delete_events(request: Request, workspace: Workspace = Depends(get_workspace)):
    """
    Delete every selected event.

    Partial failures are reported with explicit counts; the failed events
    reappear in the next events listing.
    """
    annotate_request(request, calendars_requested=len(workspace.selected_calendar_ids))
    report, refreshed = await workspace.delete_selected()
    annotate_request(
        request,
        events_succeeded=report.succeeded,
        events_failed=report.failed,
    )
    return DeletionReportResponse(
        succeeded=report.succeeded,
        failed=report.failed,
        failed_events=[
            EventKeyModel(calendar_id=key.calendar_id, event_id=key.event_id)
            for key in sorted(report.failed_ids)
        ],
        partial=report.partial,
        message=report.message,
        stale=not refreshed,
    )
