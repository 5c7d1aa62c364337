"""
Calendar API routes.

This module provides:
- POST /calendar - Create a calendar linked to its creator
- GET|PUT|DELETE /calendar/{calendar_id} - Calendars the caller has access to
"""

import logging

from fastapi import APIRouter, status

from calendarium.api.dependencies import AccessibleCalendar, AuthUser, CalendarServiceDep
from calendarium.schemas.calendar import (
    CalendarCreate,
    CalendarCreatedResponse,
    CalendarResponse,
    CalendarUpdate,
)
from calendarium.schemas.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar", tags=["Calendars"])


@router.post(
    "",
    response_model=ApiResponse[CalendarCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create a calendar",
    description="Creates the calendar and gives the caller access to it, atomically.",
)
async def create_calendar(
    calendar_data: CalendarCreate,
    current_user: AuthUser,
    calendar_service: CalendarServiceDep,
) -> ApiResponse[CalendarCreatedResponse]:
    calendar = await calendar_service.create_calendar(current_user, calendar_data)
    return ApiResponse[CalendarCreatedResponse](
        success=True,
        message="Calendar created",
        data=CalendarCreatedResponse(
            calendar_id=calendar.calendar_id,
            user_id=current_user.user_id,
        ),
    )


@router.get(
    "/{calendar_id}",
    response_model=ApiResponse[CalendarResponse],
    response_model_exclude_none=True,
    summary="Get a calendar",
)
async def get_calendar(calendar: AccessibleCalendar) -> ApiResponse[CalendarResponse]:
    return ApiResponse[CalendarResponse](
        success=True,
        data=CalendarResponse.model_validate(calendar),
    )


@router.put(
    "/{calendar_id}",
    response_model=ApiResponse[CalendarResponse],
    response_model_exclude_none=True,
    summary="Update a calendar",
)
async def update_calendar(
    calendar_data: CalendarUpdate,
    calendar: AccessibleCalendar,
    calendar_service: CalendarServiceDep,
) -> ApiResponse[CalendarResponse]:
    calendar = await calendar_service.update_calendar(calendar, calendar_data)
    return ApiResponse[CalendarResponse](
        success=True,
        message="Calendar updated",
        data=CalendarResponse.model_validate(calendar),
    )


@router.delete(
    "/{calendar_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete a calendar",
    description="""
    Soft-deletes the calendar together with its user links, its events and
    their calendar links, in one transaction with one timestamp.
    """,
)
async def delete_calendar(
    calendar: AccessibleCalendar,
    calendar_service: CalendarServiceDep,
) -> ApiResponse[None]:
    await calendar_service.delete_calendar(calendar)
    return ApiResponse[None](success=True, message="Calendar deleted")
