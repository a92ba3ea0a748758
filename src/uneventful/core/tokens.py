"""
Session credential holder with proactive, single-flight refresh.

The store owns the access token, its expiry and the refresh token for one
authenticated session. Every outbound calendar call asks it for a usable token
through get_valid_token().
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Protocol

from uneventful.core.config import TOKEN_EXPIRY_MARGIN_SECONDS
from uneventful.core.errors import AuthFailure, SessionExpired

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenGrant:
    """Credentials handed out by the authentication boundary."""

    access_token: str
    expires_at: datetime
    refresh_token: str | None = None


class TokenIssuer(Protocol):
    """What the token store needs from the authentication boundary."""

    async def refresh(self, refresh_token: str) -> TokenGrant: ...

    async def revoke(self, token: str) -> None: ...


class TokenState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
    EXPIRED = "expired"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenStore:
    """Holds one session's credentials and refreshes them on demand.

    State machine::

        UNAUTHENTICATED -> AUTHENTICATED -> REFRESHING -> AUTHENTICATED | EXPIRED

    EXPIRED is terminal until authenticate() is called again with a fresh grant.
    Concurrent callers that find the token stale share one refresh task.
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        *,
        margin: timedelta = timedelta(seconds=TOKEN_EXPIRY_MARGIN_SECONDS),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._issuer = issuer
        self._margin = margin
        self._clock = clock
        self._access_token: str | None = None
        self._refresh_token: str | None = None
        self._expires_at: datetime | None = None
        self._state = TokenState.UNAUTHENTICATED
        self._refresh_task: asyncio.Task | None = None

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def expires_at(self) -> datetime | None:
        return self._expires_at

    @property
    def is_authenticated(self) -> bool:
        return self._state in (TokenState.AUTHENTICATED, TokenState.REFRESHING)

    def authenticate(self, grant: TokenGrant) -> None:
        """Install credentials from a sign-in (or re-sign-in)."""
        self._access_token = grant.access_token
        self._expires_at = grant.expires_at
        if grant.refresh_token:
            self._refresh_token = grant.refresh_token
        self._state = TokenState.AUTHENTICATED

    def needs_refresh(self) -> bool:
        if self._access_token is None or self._expires_at is None:
            return True
        return self._clock() >= self._expires_at - self._margin

    async def get_valid_token(self) -> str:
        """Return a usable access token, refreshing first if it is stale.

        Raises:
            SessionExpired: the session is expired, or the refresh was rejected
            AuthFailure: no credentials have been installed
        """
        if self._state is TokenState.UNAUTHENTICATED:
            raise AuthFailure("Not signed in")
        if self._state is TokenState.EXPIRED:
            raise SessionExpired("Session has expired")

        token = self._access_token
        if self._refresh_task is None and token is not None and not self.needs_refresh():
            return token

        return await self.refresh()

    async def refresh(self) -> str:
        """Exchange the refresh token for a new access token.

        Only one exchange runs at a time: a caller arriving while one is in
        flight awaits the same task.
        """
        if self._state is TokenState.EXPIRED:
            raise SessionExpired("Session has expired")

        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._run_refresh())
            self._refresh_task = task
        return await asyncio.shield(task)

    async def _run_refresh(self) -> str:
        self._state = TokenState.REFRESHING
        try:
            if not self._refresh_token:
                raise SessionExpired("No refresh token available")
            grant = await self._issuer.refresh(self._refresh_token)
        except SessionExpired:
            logger.info("Token refresh rejected; session expired")
            self._expire()
            raise
        except Exception:
            # Transport failures leave the current credentials in place
            if self._state is TokenState.REFRESHING:
                self._state = TokenState.AUTHENTICATED
            raise
        finally:
            self._refresh_task = None

        if self._state is not TokenState.REFRESHING:
            # invalidate() ran while the exchange was in flight
            raise AuthFailure("Session was signed out during refresh")

        self.authenticate(grant)
        logger.debug("Access token refreshed, expires at %s", grant.expires_at.isoformat())
        return grant.access_token

    async def revoke(self) -> None:
        """Revoke the grant with the issuer and clear local state."""
        token = self._refresh_token or self._access_token
        self.invalidate()
        if token:
            await self._issuer.revoke(token)

    def invalidate(self) -> None:
        """Drop all credentials unconditionally."""
        self._access_token = None
        self._refresh_token = None
        self._expires_at = None
        self._state = TokenState.UNAUTHENTICATED

    def _expire(self) -> None:
        self._access_token = None
        self._refresh_token = None
        self._expires_at = None
        self._state = TokenState.EXPIRED
