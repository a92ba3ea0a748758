"""FastAPI dependencies for session authentication and shared resources."""

from fastapi import Depends, Header, Request

from uneventful.core.errors import AuthFailure
from uneventful.core.oauth import GoogleOAuth
from uneventful.services.sessions import Session, SessionRegistry
from uneventful.services.workspace import Workspace

_oauth: GoogleOAuth | None = None
_registry: SessionRegistry | None = None


def get_oauth() -> GoogleOAuth:
    """Get or create the Google OAuth client (lazy initialization)."""
    global _oauth
    if _oauth is None:
        _oauth = GoogleOAuth()
    return _oauth


def get_registry(oauth: GoogleOAuth = Depends(get_oauth)) -> SessionRegistry:
    """Get or create the session registry (lazy initialization)."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(oauth)
    return _registry


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session(
    request: Request,
    authorization: str | None = Header(None),
    registry: SessionRegistry = Depends(get_registry),
) -> Session:
    """
    Resolve the caller's session from the Authorization header.

    The session and registry are stashed on ``request.state`` so the
    AuthFailure handler can tear the session down.

    Raises:
        AuthFailure: missing, forged, unknown or expired session token
    """
    request.state.registry = registry
    token = bearer_token(authorization)
    if token is None:
        raise AuthFailure("Missing session token")

    session = registry.lookup(token)
    if session is not None:
        request.state.session = session
    return registry.resolve(token)


async def get_workspace(session: Session = Depends(get_session)) -> Workspace:
    return session.workspace
