"""
User-calendar link API routes.

Sharing is an administrative operation: every endpoint requires the
``admin`` role.

This module provides:
- POST /user-calendar - Link a user to a calendar (ids in the body)
- GET /user-calendar/{user_id} - A user's calendars
- GET|POST|PUT|DELETE /user-calendar/{user_id}/{calendar_id}
"""

import logging

from fastapi import APIRouter, Depends, status

from calendarium.api.dependencies import (
    ResolvedCalendar,
    ResolvedUser,
    UserCalendarServiceDep,
    require_admin,
)
from calendarium.schemas.calendar import (
    UserCalendarCreate,
    UserCalendarCreatedResponse,
    UserCalendarListItem,
    UserCalendarResponse,
)
from calendarium.schemas.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user-calendar",
    tags=["User Calendars"],
    dependencies=[Depends(require_admin)],
)


@router.post(
    "",
    response_model=ApiResponse[UserCalendarCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Link a user to a calendar",
)
async def create_user_calendar(
    link_data: UserCalendarCreate,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[UserCalendarCreatedResponse]:
    """
    Raises:
        - 404 UserNotFound / CalendarNotFound
        - 409 UserCalendarAlreadyExists
    """
    link = await user_calendar_service.create_link(link_data.user_id, link_data.calendar_id)
    return ApiResponse[UserCalendarCreatedResponse](
        success=True,
        message="User linked to calendar",
        data=UserCalendarCreatedResponse(user_calendar_id=link.user_calendar_id),
    )


@router.get(
    "/{user_id}",
    response_model=ApiResponse[list[UserCalendarListItem]],
    response_model_exclude_none=True,
    summary="List a user's calendars",
)
async def list_user_calendars(
    user: ResolvedUser,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[list[UserCalendarListItem]]:
    items = await user_calendar_service.list_links(user.user_id)
    return ApiResponse[list[UserCalendarListItem]](success=True, data=items)


@router.post(
    "/{user_id}/{calendar_id}",
    response_model=ApiResponse[UserCalendarCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Link a user to a calendar",
)
async def create_user_calendar_by_path(
    user: ResolvedUser,
    calendar: ResolvedCalendar,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[UserCalendarCreatedResponse]:
    link = await user_calendar_service.create_link(user.user_id, calendar.calendar_id)
    return ApiResponse[UserCalendarCreatedResponse](
        success=True,
        message="User linked to calendar",
        data=UserCalendarCreatedResponse(user_calendar_id=link.user_calendar_id),
    )


@router.get(
    "/{user_id}/{calendar_id}",
    response_model=ApiResponse[UserCalendarResponse],
    response_model_exclude_none=True,
    summary="Get a link",
)
async def get_user_calendar(
    user: ResolvedUser,
    calendar: ResolvedCalendar,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[UserCalendarResponse]:
    link = await user_calendar_service.get_link(user.user_id, calendar.calendar_id)
    return ApiResponse[UserCalendarResponse](
        success=True,
        data=UserCalendarResponse.model_validate(link),
    )


@router.put(
    "/{user_id}/{calendar_id}",
    response_model=ApiResponse[UserCalendarResponse],
    response_model_exclude_none=True,
    summary="Touch a link",
    description="A link has no mutable fields; this only advances `updated_at`.",
)
async def update_user_calendar(
    user: ResolvedUser,
    calendar: ResolvedCalendar,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[UserCalendarResponse]:
    link = await user_calendar_service.touch_link(user.user_id, calendar.calendar_id)
    return ApiResponse[UserCalendarResponse](
        success=True,
        message="Link updated",
        data=UserCalendarResponse.model_validate(link),
    )


@router.delete(
    "/{user_id}/{calendar_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Unlink a user from a calendar",
)
async def delete_user_calendar(
    user: ResolvedUser,
    calendar: ResolvedCalendar,
    user_calendar_service: UserCalendarServiceDep,
) -> ApiResponse[None]:
    await user_calendar_service.delete_link(user.user_id, calendar.calendar_id)
    return ApiResponse[None](success=True, message="User unlinked from calendar")
