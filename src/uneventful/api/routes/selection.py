"""Selection endpoints: toggle one event, select all visible, clear."""

from fastapi import APIRouter, Depends

from uneventful.api.dependencies import get_workspace
from uneventful.api.models.responses import EventKeyModel, EventsResponse
from uneventful.api.routes.events import build_events_response
from uneventful.models.events import EventKey
from uneventful.services.workspace import Workspace

router = APIRouter(prefix="/v1/selection")


@router.post("/toggle", response_model=EventsResponse)
async def toggle_event(body: EventKeyModel, workspace: Workspace = Depends(get_workspace)):
    workspace.toggle_event(EventKey(body.calendar_id, body.event_id))
    return build_events_response(workspace)


@router.post("/select-all", response_model=EventsResponse)
async def select_all(workspace: Workspace = Depends(get_workspace)):
    """Select every visible event, or clear if exactly those are selected."""
    workspace.select_all()
    return build_events_response(workspace)


@router.delete("", response_model=EventsResponse)
async def clear_selection(workspace: Workspace = Depends(get_workspace)):
    workspace.clear_selection()
    return build_events_response(workspace)
