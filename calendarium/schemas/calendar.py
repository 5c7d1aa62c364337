"""
Calendar and user-calendar Pydantic schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CalendarCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255, description="Calendar title")
    description: str | None = Field(default=None, description="Optional description")


class CalendarUpdate(BaseModel):
    """Partial calendar update; ``updated_at`` always advances."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class CalendarResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    calendar_id: int
    title: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class CalendarCreatedResponse(BaseModel):
    """The new calendar and the user it was linked to."""

    calendar_id: int
    user_id: int


class UserCalendarCreate(BaseModel):
    """Body form of the link creation endpoint."""

    user_id: int = Field(gt=0)
    calendar_id: int = Field(gt=0)


class UserCalendarResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_calendar_id: int
    user_id: int
    calendar_id: int
    created_at: datetime
    updated_at: datetime | None = None


class UserCalendarCreatedResponse(BaseModel):
    user_calendar_id: int


class UserCalendarListItem(UserCalendarResponse):
    """A link joined with the calendar it points to."""

    title: str
    description: str | None = None
