"""
Google OAuth boundary: code exchange, refresh-token exchange and revocation.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from uneventful.core.config import (
    DEFAULT_TOKEN_LIFETIME_SECONDS,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_OAUTH_REVOKE_URL,
    GOOGLE_OAUTH_TOKEN_URL,
)
from uneventful.core.errors import NetworkFailure, SessionExpired
from uneventful.core.http_client import get_http_client, safe_error_message
from uneventful.core.tokens import TokenGrant

logger = logging.getLogger(__name__)


class GoogleOAuth:
    """Talks to Google's token endpoints on behalf of a TokenStore.

    Google does not normally rotate refresh tokens; when a response does carry
    a new one it is returned in the grant and replaces the old one.
    """

    def __init__(
        self,
        client_id: str = GOOGLE_CLIENT_ID,
        client_secret: str = GOOGLE_CLIENT_SECRET,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._http_client = http_client

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenGrant:
        """Exchange a sign-in authorization code for an access/refresh pair."""
        grant = await self._token_request(
            {
                "code": code,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        if not grant.refresh_token:
            # Without offline access the session cannot outlive one access token
            logger.warning("Authorization code exchange returned no refresh token")
        return grant

    async def refresh(self, refresh_token: str) -> TokenGrant:
        grant = await self._token_request(
            {"refresh_token": refresh_token, "grant_type": "refresh_token"}
        )
        if grant.refresh_token is None:
            grant = TokenGrant(
                access_token=grant.access_token,
                expires_at=grant.expires_at,
                refresh_token=refresh_token,
            )
        return grant

    async def revoke(self, token: str) -> None:
        try:
            response = await self.http.post(
                GOOGLE_OAUTH_REVOKE_URL,
                data={"token": token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"Google OAuth revoke request failed: {exc}") from exc

        # 400 means the token was already invalid, which is the outcome we want
        if response.status_code >= 500:
            raise NetworkFailure(
                f"Google OAuth revoke failed ({response.status_code}): "
                f"{safe_error_message(response)}"
            )

    async def _token_request(self, data: dict[str, str]) -> TokenGrant:
        payload = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            **data,
        }
        try:
            response = await self.http.post(
                GOOGLE_OAUTH_TOKEN_URL,
                data=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"Google OAuth token request failed: {exc}") from exc

        if response.status_code in (400, 401, 403):
            raise SessionExpired(
                f"Google OAuth token request rejected ({response.status_code}): "
                f"{safe_error_message(response)}"
            )
        if response.status_code < 200 or response.status_code >= 300:
            raise NetworkFailure(
                f"Google OAuth token request failed ({response.status_code}): "
                f"{safe_error_message(response)}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkFailure("Google OAuth token endpoint returned invalid JSON") from exc

        return parse_token_response(body)


def parse_token_response(body: Any, now: datetime | None = None) -> TokenGrant:
    """Build a TokenGrant from a token endpoint JSON body."""
    if not isinstance(body, dict):
        raise NetworkFailure("Google OAuth token endpoint returned an unexpected payload")

    access_token = body.get("access_token")
    if not isinstance(access_token, str) or not access_token.strip():
        raise NetworkFailure("Google OAuth token response is missing a non-empty access_token")

    expires_in = body.get("expires_in")
    if isinstance(expires_in, bool) or not isinstance(expires_in, int | float) or expires_in <= 0:
        expires_in = DEFAULT_TOKEN_LIFETIME_SECONDS

    refresh_token = body.get("refresh_token")
    if not isinstance(refresh_token, str) or not refresh_token.strip():
        refresh_token = None

    issued_at = now or datetime.now(timezone.utc)
    return TokenGrant(
        access_token=access_token.strip(),
        expires_at=issued_at + timedelta(seconds=int(expires_in)),
        refresh_token=refresh_token,
    )
