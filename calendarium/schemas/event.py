"""
Event Pydantic schemas for API request/response handling.

Durations are plain integers here: the lower bound is enforced by the
service, which reports InvalidDuration.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calendarium.schemas.common import as_utc


class EventCreate(BaseModel):
    """
    Schema for creating an event in a calendar.

    ``calendar_id`` is accepted for compatibility with older clients; the
    calendar in the path is authoritative.
    """

    title: str = Field(min_length=1, max_length=255, description="Event title")
    description: str | None = Field(default=None)
    start: datetime = Field(description="Start instant (RFC 3339; naive values are UTC)")
    duration: int = Field(description="Length in minutes, at least 1")
    canceled: bool | None = Field(default=None, description="Defaults to false")
    calendar_id: int | None = Field(default=None, description="Ignored, see path")

    @field_validator("start")
    @classmethod
    def normalize_start(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class EventUpdate(BaseModel):
    """Partial event update; ``updated_at`` always advances."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start: datetime | None = None
    duration: int | None = None
    canceled: bool | None = None

    @field_validator("start")
    @classmethod
    def normalize_start(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    title: str
    description: str | None = None
    start: datetime
    duration: int
    canceled: bool
    created_at: datetime
    updated_at: datetime | None = None


class EventCreatedResponse(BaseModel):
    event_id: int
    calendar_id: int
