"""
Common Pydantic schemas for API request/response handling.

This module provides:
- The response envelope shared by every endpoint
- A UTC normalizer for incoming timestamps
"""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

# Type variable for the envelope payload
DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Envelope wrapping every response body.

    Successful responses set ``success`` and carry ``data`` and/or
    ``message``; failures set ``error`` to a stable kind. Routes declare
    ``response_model_exclude_none=True`` so absent fields are omitted.

    Example:
        >>> ApiResponse[CalendarCreatedResponse](
        ...     success=True,
        ...     message="Calendar created",
        ...     data=CalendarCreatedResponse(calendar_id=1, user_id=1),
        ... )
    """

    success: bool = Field(description="Whether the operation succeeded")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: DataT | None = Field(default=None, description="Operation payload")
    error: str | None = Field(default=None, description="Error kind on failure")


def as_utc(value: datetime | None) -> datetime | None:
    """Read naive timestamps as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
