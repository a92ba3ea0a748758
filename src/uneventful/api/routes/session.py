"""Sign-in and sign-out endpoints."""

from fastapi import APIRouter, Depends, Request, Response, status

from uneventful.api.dependencies import get_oauth, get_registry, get_session
from uneventful.api.models.requests import SessionCreateRequest
from uneventful.api.models.responses import SessionResponse
from uneventful.core.oauth import GoogleOAuth
from uneventful.services.sessions import Session, SessionRegistry

router = APIRouter(prefix="/v1")


@router.post("/session", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Request,
    body: SessionCreateRequest,
    oauth: GoogleOAuth = Depends(get_oauth),
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Exchange a Google authorization code for a session token.

    With ``resume_token`` set to an expired session's token, the new
    credentials are attached to that session so its workspace (and any
    pending selection) survives re-authentication.
    """
    request.state.registry = registry
    grant = await oauth.exchange_code(body.code, body.redirect_uri)

    session = None
    if body.resume_token:
        session = await registry.resume(body.resume_token, grant)
    resumed = session is not None
    if session is None:
        session = registry.create(grant)

    return SessionResponse(
        session_token=registry.issue_token(session),
        expires_at=session.tokens.expires_at,
        resumed=resumed,
    )


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session: Session = Depends(get_session),
    registry: SessionRegistry = Depends(get_registry),
):
    """Sign out: revoke the Google grant and forget the session."""
    await registry.logout(session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
