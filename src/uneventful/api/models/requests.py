"""Pydantic request bodies."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from uneventful.models.events import TimeWindow


class SessionCreateRequest(BaseModel):
    """Google sign-in result exchanged for a session."""

    code: str = Field(min_length=1)
    redirect_uri: str = Field(min_length=1)
    # Session token of an expired session to resume instead of starting over
    resume_token: str | None = None


class WindowRequest(BaseModel):
    time_min: datetime
    time_max: datetime | None = None

    @field_validator("time_min", "time_max")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_window(self) -> TimeWindow:
        return TimeWindow(time_min=self.time_min, time_max=self.time_max)


class SearchRequest(BaseModel):
    query: str = ""
