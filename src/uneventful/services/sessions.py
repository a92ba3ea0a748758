"""
Opaque session tokens mapping a browser tab to its credentials and workspace.

A session token is ``<session id>.<signature>`` where the signature is an
HMAC-SHA256 of the id under SESSION_SECRET. The client never sees Google
tokens.
"""

import base64
import hashlib
import hmac
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import httpx

from uneventful.core.config import SESSION_RESUME_MINUTES, SESSION_SECRET
from uneventful.core.errors import AuthFailure, CalendarError, NetworkFailure
from uneventful.core.oauth import GoogleOAuth
from uneventful.core.tokens import TokenGrant, TokenStore
from uneventful.services.calendar import CalendarService
from uneventful.services.workspace import Workspace

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """One signed-in user: a token store and the workspace built on it."""

    session_id: str
    tokens: TokenStore
    workspace: Workspace
    created_at: datetime = field(default_factory=_utcnow)
    # Set when the credentials were torn down after an AuthFailure
    expired_at: datetime | None = None


class SessionRegistry:
    """In-memory registry of live sessions."""

    def __init__(
        self,
        oauth: GoogleOAuth,
        secret: str = SESSION_SECRET,
        resume_window: timedelta = timedelta(minutes=SESSION_RESUME_MINUTES),
        clock: Callable[[], datetime] = _utcnow,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not secret:
            # Tokens still verify within this process, but not across restarts
            logger.warning("SESSION_SECRET is not set; using a random per-process key")
            secret = secrets.token_urlsafe(32)
        self._oauth = oauth
        self._secret = secret.encode()
        self._resume_window = resume_window
        self._clock = clock
        self._http_client = http_client
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    # -------------------------------------------------------------------------
    # Token signing
    # -------------------------------------------------------------------------

    def _sign(self, session_id: str) -> str:
        digest = hmac.new(self._secret, session_id.encode(), hashlib.sha256).digest()
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()

    def issue_token(self, session: Session) -> str:
        return f"{session.session_id}.{self._sign(session.session_id)}"

    def _session_id_from_token(self, token: str) -> str | None:
        session_id, _, signature = token.partition(".")
        if not session_id or not signature:
            return None
        # Constant-time comparison to prevent timing attacks
        if not secrets.compare_digest(signature, self._sign(session_id)):
            return None
        return session_id

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create(self, grant: TokenGrant) -> Session:
        """Start a session from a fresh sign-in."""
        self.prune()
        tokens = TokenStore(self._oauth)
        tokens.authenticate(grant)
        service = CalendarService(tokens, http_client=self._http_client)
        session = Session(
            session_id=secrets.token_urlsafe(24),
            tokens=tokens,
            workspace=Workspace(service),
        )
        self._sessions[session.session_id] = session
        logger.info("Session %s created", session.session_id[:8])
        return session

    async def resume(self, token: str, grant: TokenGrant) -> Session | None:
        """
        Re-attach fresh credentials to an existing session's workspace.

        If the new grant belongs to a different Google account the workspace
        is reset, so marks made under the old account are never deleted with
        the new one.
        """
        session = self.lookup(token)
        if session is None:
            return None

        session.tokens.authenticate(grant)
        try:
            same_account = await session.workspace.same_account()
        except CalendarError:
            session.tokens.invalidate()
            raise
        if not same_account:
            logger.warning(
                "Session %s re-authenticated as a different account; resetting workspace",
                session.session_id[:8],
            )
            session.workspace.reset()

        session.expired_at = None
        logger.info("Session %s re-authenticated", session.session_id[:8])
        return session

    def resolve(self, token: str) -> Session:
        """
        Find the live session for a token.

        Raises:
            AuthFailure: unknown, forged, or expired session
        """
        session = self.lookup(token)
        if session is None:
            raise AuthFailure("Invalid or unknown session token")
        if session.expired_at is not None or not session.tokens.is_authenticated:
            raise AuthFailure("Session has expired")
        return session

    def expire(self, session: Session) -> None:
        """Tear down credentials after an AuthFailure, keeping the workspace."""
        session.tokens.invalidate()
        if session.expired_at is None:
            session.expired_at = self._clock()
            logger.info("Session %s expired; awaiting re-authentication", session.session_id[:8])

    async def logout(self, session: Session) -> None:
        self._sessions.pop(session.session_id, None)
        try:
            await session.tokens.revoke()
        except NetworkFailure as e:
            # The local session is gone either way
            logger.warning("Could not revoke Google grant: %s", e)
        logger.info("Session %s signed out", session.session_id[:8])

    def prune(self) -> None:
        """Drop expired sessions whose resume window has passed."""
        cutoff = self._clock() - self._resume_window
        stale = [
            session_id
            for session_id, session in self._sessions.items()
            if session.expired_at is not None and session.expired_at < cutoff
        ]
        for session_id in stale:
            del self._sessions[session_id]

    def lookup(self, token: str) -> Session | None:
        """Find a session by token, live or expired. None if unknown or forged."""
        session_id = self._session_id_from_token(token)
        if session_id is None:
            return None
        self.prune()
        return self._sessions.get(session_id)
