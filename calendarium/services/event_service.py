"""
Event service.

This module provides:
- Event creation inside a calendar
- Partial event update
- Event deletion with link fan-out
- Range listings (day, ISO week, month)
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.database import atomic, map_db_error
from calendarium.exceptions import (
    EventCreationError,
    EventDeleteError,
    EventListError,
    EventUpdateError,
    InvalidDurationError,
)
from calendarium.models.calendar import Calendar
from calendarium.models.event import CalendarEvent, Event
from calendarium.repositories.event_repository import CalendarEventRepository, EventRepository
from calendarium.schemas.event import EventCreate, EventUpdate

logger = logging.getLogger(__name__)

MIN_DURATION = 1


def validate_duration(duration: int) -> None:
    """Raise InvalidDurationError for durations below one minute."""
    if duration < MIN_DURATION:
        raise InvalidDurationError()


class EventService:
    """Service class for event operations within an accessible calendar."""

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock
        self.event_repo = EventRepository(session)
        self.calendar_event_repo = CalendarEventRepository(session)

    async def create_event(self, calendar: Calendar, data: EventCreate) -> Event:
        """
        Create an event and attach it to ``calendar``.

        Both rows are written in one transaction. ``canceled`` defaults to
        false.

        Raises:
            InvalidDurationError: Duration below one minute
        """
        validate_duration(data.duration)

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(EventCreationError):
                event = await self.event_repo.add(
                    Event(
                        title=data.title,
                        description=data.description,
                        start=data.start,
                        duration=data.duration,
                        canceled=bool(data.canceled),
                        created_at=now,
                    )
                )
                await self.calendar_event_repo.add(
                    CalendarEvent(
                        calendar_id=calendar.calendar_id,
                        event_id=event.event_id,
                        created_at=now,
                    )
                )

        logger.info(f"Event {event.event_id} created in calendar {calendar.calendar_id}")
        return event

    async def update_event(self, event: Event, data: EventUpdate) -> Event:
        """Apply a partial update; ``updated_at`` always advances."""
        if data.duration is not None:
            validate_duration(data.duration)

        if data.title is not None:
            event.title = data.title
        if "description" in data.model_fields_set:
            event.description = data.description
        if data.start is not None:
            event.start = data.start
        if data.duration is not None:
            event.duration = data.duration
        if data.canceled is not None:
            event.canceled = data.canceled
        event.updated_at = self.clock.now()

        async with atomic(self.session):
            async with map_db_error(EventUpdateError):
                event = await self.event_repo.update(event)

        logger.info(f"Event {event.event_id} updated")
        return event

    async def delete_event(self, event: Event) -> None:
        """Soft-delete an event and its live calendar links, atomically."""
        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(EventDeleteError):
                await self.event_repo.soft_delete(event, now)
                await self.calendar_event_repo.soft_delete_where(
                    CalendarEvent.event_id == event.event_id, now=now
                )

        logger.info(f"Event {event.event_id} deleted")

    async def list_events(self, calendar: Calendar, start: datetime, end: datetime) -> list[Event]:
        """Get the live events of ``calendar`` starting in ``[start, end)``."""
        async with map_db_error(EventListError):
            return await self.event_repo.list_in_range(calendar.calendar_id, start, end)
