"""
Calendar event API routes.

Every endpoint runs ``auth -> calendar -> access check`` first; endpoints
on a single event then resolve the event inside that calendar.

This module provides:
- POST /calendar-event/{calendar_id} - Create an event
- GET /calendar-event/{calendar_id}?filter_type=&date= - List by period
- GET /calendar-event/{calendar_id}/month/{year}/{month}
- GET /calendar-event/{calendar_id}/week/{year}/{week} - ISO-8601 week
- GET /calendar-event/{calendar_id}/day/{year}/{month}/{day}
- GET|PUT|DELETE /calendar-event/{calendar_id}/{event_id}
"""

import logging

from fastapi import APIRouter, Query, status

from calendarium.api.dependencies import (
    AccessibleCalendar,
    AppClock,
    EventServiceDep,
    ResolvedEvent,
)
from calendarium.core.date_ranges import DateRange, day_range, filter_range, month_range, week_range
from calendarium.models.calendar import Calendar
from calendarium.schemas.common import ApiResponse
from calendarium.schemas.event import (
    EventCreate,
    EventCreatedResponse,
    EventResponse,
    EventUpdate,
)
from calendarium.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar-event", tags=["Events"])


async def _list(
    event_service: EventService,
    calendar: Calendar,
    date_range: DateRange,
) -> ApiResponse[list[EventResponse]]:
    start, end = date_range
    events = await event_service.list_events(calendar, start, end)
    return ApiResponse[list[EventResponse]](
        success=True,
        data=[EventResponse.model_validate(event) for event in events],
    )


@router.post(
    "/{calendar_id}",
    response_model=ApiResponse[EventCreatedResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
    description="""
    Create an event in the calendar. `duration` is in minutes and must be
    at least 1; `canceled` defaults to false. A `calendar_id` in the body
    is ignored in favour of the path.
    """,
)
async def create_event(
    event_data: EventCreate,
    calendar: AccessibleCalendar,
    event_service: EventServiceDep,
) -> ApiResponse[EventCreatedResponse]:
    event = await event_service.create_event(calendar, event_data)
    return ApiResponse[EventCreatedResponse](
        success=True,
        message="Event created",
        data=EventCreatedResponse(event_id=event.event_id, calendar_id=calendar.calendar_id),
    )


# ============================================================================
# Listings
# ============================================================================


@router.get(
    "/{calendar_id}",
    response_model=ApiResponse[list[EventResponse]],
    response_model_exclude_none=True,
    summary="List events by period",
    description="""
    `filter_type` is `day`, `week` or `month` (default). `date` is
    `YYYY-MM-DD`, `YYYY-Www` or `YYYY-MM` accordingly; without it the
    current period is listed.
    """,
)
async def list_events(
    calendar: AccessibleCalendar,
    event_service: EventServiceDep,
    clock: AppClock,
    filter_type: str = Query(default="month"),
    date: str | None = Query(default=None),
) -> ApiResponse[list[EventResponse]]:
    return await _list(event_service, calendar, filter_range(filter_type, date, clock.now()))


@router.get(
    "/{calendar_id}/month/{year}/{month}",
    response_model=ApiResponse[list[EventResponse]],
    response_model_exclude_none=True,
    summary="List events of a month",
)
async def list_events_by_month(
    year: str,
    month: str,
    calendar: AccessibleCalendar,
    event_service: EventServiceDep,
) -> ApiResponse[list[EventResponse]]:
    return await _list(event_service, calendar, month_range(year, month))


@router.get(
    "/{calendar_id}/week/{year}/{week}",
    response_model=ApiResponse[list[EventResponse]],
    response_model_exclude_none=True,
    summary="List events of an ISO week",
)
async def list_events_by_week(
    year: str,
    week: str,
    calendar: AccessibleCalendar,
    event_service: EventServiceDep,
) -> ApiResponse[list[EventResponse]]:
    return await _list(event_service, calendar, week_range(year, week))


@router.get(
    "/{calendar_id}/day/{year}/{month}/{day}",
    response_model=ApiResponse[list[EventResponse]],
    response_model_exclude_none=True,
    summary="List events of a day",
)
async def list_events_by_day(
    year: str,
    month: str,
    day: str,
    calendar: AccessibleCalendar,
    event_service: EventServiceDep,
) -> ApiResponse[list[EventResponse]]:
    return await _list(event_service, calendar, day_range(year, month, day))


# ============================================================================
# Single Event
# ============================================================================


@router.get(
    "/{calendar_id}/{event_id}",
    response_model=ApiResponse[EventResponse],
    response_model_exclude_none=True,
    summary="Get an event",
)
async def get_event(event: ResolvedEvent) -> ApiResponse[EventResponse]:
    return ApiResponse[EventResponse](success=True, data=EventResponse.model_validate(event))


@router.put(
    "/{calendar_id}/{event_id}",
    response_model=ApiResponse[EventResponse],
    response_model_exclude_none=True,
    summary="Update an event",
)
async def update_event(
    event_data: EventUpdate,
    event: ResolvedEvent,
    event_service: EventServiceDep,
) -> ApiResponse[EventResponse]:
    event = await event_service.update_event(event, event_data)
    return ApiResponse[EventResponse](
        success=True,
        message="Event updated",
        data=EventResponse.model_validate(event),
    )


@router.delete(
    "/{calendar_id}/{event_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Delete an event",
)
async def delete_event(event: ResolvedEvent, event_service: EventServiceDep) -> ApiResponse[None]:
    await event_service.delete_event(event)
    return ApiResponse[None](success=True, message="Event deleted")
