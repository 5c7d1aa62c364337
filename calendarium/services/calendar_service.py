"""
Calendar service.

This module provides:
- Calendar creation (linked to its creator in the same transaction)
- Partial calendar update
- Calendar deletion with fan-out to links and events
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.database import atomic, map_db_error
from calendarium.exceptions import (
    CalendarCreationError,
    CalendarDeleteError,
    CalendarUpdateError,
)
from calendarium.models.calendar import Calendar, UserCalendar
from calendarium.models.event import CalendarEvent, Event
from calendarium.models.user import User
from calendarium.repositories.calendar_repository import (
    CalendarRepository,
    UserCalendarRepository,
)
from calendarium.repositories.event_repository import CalendarEventRepository, EventRepository
from calendarium.schemas.calendar import CalendarCreate, CalendarUpdate

logger = logging.getLogger(__name__)


class CalendarService:
    """
    Service class for calendar operations.

    Access checks happen upstream (dependencies); the service assumes the
    caller may act on the calendar it is given.
    """

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock
        self.calendar_repo = CalendarRepository(session)
        self.user_calendar_repo = UserCalendarRepository(session)
        self.event_repo = EventRepository(session)
        self.calendar_event_repo = CalendarEventRepository(session)

    async def create_calendar(self, owner: User, data: CalendarCreate) -> Calendar:
        """
        Create a calendar and give its creator access to it.

        Both rows are written in one transaction; a failure on either
        leaves nothing behind.

        Returns:
            The created calendar
        """
        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(CalendarCreationError):
                calendar = await self.calendar_repo.add(
                    Calendar(title=data.title, description=data.description, created_at=now)
                )
                await self.user_calendar_repo.add(
                    UserCalendar(
                        user_id=owner.user_id,
                        calendar_id=calendar.calendar_id,
                        created_at=now,
                    )
                )

        logger.info(f"Calendar {calendar.calendar_id} created by user {owner.user_id}")
        return calendar

    async def update_calendar(self, calendar: Calendar, data: CalendarUpdate) -> Calendar:
        """Apply a partial update; ``updated_at`` always advances."""
        if data.title is not None:
            calendar.title = data.title
        # explicit null clears, omitted leaves unchanged
        if "description" in data.model_fields_set:
            calendar.description = data.description
        calendar.updated_at = self.clock.now()

        async with atomic(self.session):
            async with map_db_error(CalendarUpdateError):
                calendar = await self.calendar_repo.update(calendar)

        logger.info(f"Calendar {calendar.calendar_id} updated")
        return calendar

    async def delete_calendar(self, calendar: Calendar) -> None:
        """
        Soft-delete a calendar and everything hanging off it.

        In one transaction and with one timestamp: the calendar, its live
        user links, the live events attached to it, and their links.
        """
        now = self.clock.now()
        calendar_id = calendar.calendar_id
        async with atomic(self.session):
            async with map_db_error(CalendarDeleteError):
                event_ids = await self.event_repo.get_ids_in_calendar(calendar_id)
                await self.calendar_repo.soft_delete(calendar, now)
                links = await self.user_calendar_repo.soft_delete_where(
                    UserCalendar.calendar_id == calendar_id, now=now
                )
                await self.calendar_event_repo.soft_delete_where(
                    CalendarEvent.calendar_id == calendar_id, now=now
                )
                if event_ids:
                    await self.event_repo.soft_delete_where(
                        Event.event_id.in_(event_ids), now=now
                    )

        logger.info(
            f"Calendar {calendar_id} deleted with {links} user link(s) "
            f"and {len(event_ids)} event(s)"
        )
