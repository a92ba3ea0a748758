"""SQLite request logging for API."""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Request

from uneventful.core.config import DB_PATH
from uneventful.core.database import get_connection


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    started: float = field(default_factory=time.time, repr=False)
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    calendars_requested: int | None = None
    events_succeeded: int | None = None
    events_failed: int | None = None

    @classmethod
    def for_request(cls, request: Request) -> "RequestLog":
        return cls(
            endpoint=request.url.path,
            method=request.method,
            client_ip=get_client_ip(request),
        )

    def finish(self, status_code: int, error_code: str | None = None, error_message: str | None = None) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.processing_time_ms = int((time.time() - self.started) * 1000)


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def log_request(log: RequestLog, db_path: Path = DB_PATH) -> None:
    """Write request log to SQLite database."""
    conn = get_connection(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                status_code, error_code, error_message, processing_time_ms,
                calendars_requested, events_succeeded, events_failed
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.calendars_requested,
                log.events_succeeded,
                log.events_failed,
            ),
        )
        conn.commit()
    finally:
        conn.close()


def annotate_request(request: Request, **values) -> None:
    """Attach counts to the current request's log entry, if one is being kept."""
    request_log = getattr(request.state, "request_log", None)
    if request_log is None:
        return
    for name, value in values.items():
        setattr(request_log, name, value)
