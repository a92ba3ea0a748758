"""
Calendar listing, event fetching and deletion against the Google Calendar API.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from uneventful.core.config import EVENTS_PAGE_LIMIT, GOOGLE_CALENDAR_API_BASE_URL
from uneventful.core.errors import AuthFailure, NetworkFailure, ProviderError
from uneventful.core.http_client import get_http_client, safe_error_message
from uneventful.core.tokens import TokenStore
from uneventful.models.events import (
    Calendar,
    CalendarEvent,
    DeleteBatchResult,
    EventTime,
    TimeWindow,
)

logger = logging.getLogger(__name__)


class CalendarService:
    """Thin authenticated request layer. No retries happen here.

    A 401 from the provider means the token was revoked server-side and is
    raised as AuthFailure; transport errors are raised as NetworkFailure.
    """

    def __init__(
        self,
        tokens: TokenStore,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = GOOGLE_CALENDAR_API_BASE_URL,
    ) -> None:
        self._tokens = tokens
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client()

    async def list_calendars(self) -> list[Calendar]:
        """Get the user's calendar list."""
        calendars = []
        page_token = None
        while True:
            params = {"pageToken": page_token} if page_token else None
            payload = await self._request_json("GET", "/users/me/calendarList", params=params)
            for item in payload.get("items", []):
                if isinstance(item, dict) and item.get("id"):
                    calendars.append(parse_calendar(item))
            page_token = payload.get("nextPageToken")
            if not page_token:
                return calendars

    async def list_events(
        self,
        calendar_id: str,
        window: TimeWindow,
        limit: int = EVENTS_PAGE_LIMIT,
    ) -> list[CalendarEvent]:
        """
        Fetch one page of events from a calendar within a window.

        Recurring events are expanded to instances. The server caps the result
        at ``limit``; a result of exactly ``limit`` events may be truncated.
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")

        params: dict[str, Any] = {
            "timeMin": to_rfc3339(window.time_min),
            "maxResults": limit,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        if window.time_max is not None:
            params["timeMax"] = to_rfc3339(window.time_max)

        payload = await self._request_json(
            "GET",
            f"/calendars/{quote(calendar_id, safe='')}/events",
            params=params,
        )

        events = []
        for item in payload.get("items", []):
            if not isinstance(item, dict) or item.get("status") == "cancelled":
                continue
            events.append(parse_event(item, calendar_id))
        return events[:limit]

    async def delete_events(self, calendar_id: str, event_ids: list[str]) -> DeleteBatchResult:
        """
        Delete each event id independently.

        Any per-id failure (already gone, permission denied, transport error)
        is recorded and the batch continues. Only an AuthFailure stops it.
        """
        succeeded = []
        failed = []
        encoded_calendar_id = quote(calendar_id, safe="")

        for event_id in event_ids:
            path = f"/calendars/{encoded_calendar_id}/events/{quote(event_id, safe='')}"
            try:
                response = await self._request("DELETE", path)
            except NetworkFailure as e:
                logger.warning("Delete of %s in %s failed: %s", event_id, calendar_id, e)
                failed.append(event_id)
                continue

            if 200 <= response.status_code < 300:
                succeeded.append(event_id)
            else:
                logger.warning(
                    "Delete of %s in %s failed (%d): %s",
                    event_id,
                    calendar_id,
                    response.status_code,
                    safe_error_message(response),
                )
                failed.append(event_id)

        logger.info(
            "Deleted %d/%d events from %s", len(succeeded), len(event_ids), calendar_id
        )
        return DeleteBatchResult(succeeded=tuple(succeeded), failed=tuple(failed))

    async def _request_json(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        response = await self._request(method, path, params=params)

        if response.status_code < 200 or response.status_code >= 300:
            raise ProviderError(
                status_code=response.status_code,
                message=safe_error_message(response),
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                status_code=response.status_code,
                message="Google Calendar API returned invalid JSON",
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError(
                status_code=response.status_code,
                message="Google Calendar API returned an unexpected payload shape",
            )
        return payload

    async def _request(
        self, method: str, path: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        access_token = await self._tokens.get_valid_token()
        try:
            response = await self.http.request(
                method,
                f"{self._base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"Google Calendar request failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthFailure(
                f"Google Calendar rejected the access token: {safe_error_message(response)}"
            )
        return response


def parse_calendar(item: dict) -> Calendar:
    """Parse a calendarList entry into our format."""
    return Calendar(
        id=item["id"],
        summary=item.get("summary", ""),
        summary_override=item.get("summaryOverride") or None,
        background_color=item.get("backgroundColor"),
        primary=bool(item.get("primary", False)),
        time_zone=item.get("timeZone"),
        access_role=item.get("accessRole"),
    )


def parse_event(item: dict, calendar_id: str) -> CalendarEvent:
    """Parse a Google event resource into our format."""
    return CalendarEvent(
        id=item["id"],
        calendar_id=calendar_id,
        start=parse_event_time(item.get("start")),
        end=parse_event_time(item.get("end")),
        summary=item.get("summary", ""),
        description=item.get("description"),
        location=item.get("location"),
        html_link=item.get("htmlLink"),
        recurring_event_id=item.get("recurringEventId"),
    )


def parse_event_time(value: dict | None) -> EventTime:
    """Parse a ``{"dateTime": ...}`` or ``{"date": ...}`` object."""
    if not value:
        return EventTime()
    if value.get("dateTime"):
        return EventTime(date_time=datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00")))
    if value.get("date"):
        return EventTime(day=date.fromisoformat(value["date"]))
    return EventTime()


def to_rfc3339(value: datetime) -> str:
    """Format a datetime for timeMin/timeMax. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
