"""
Event and CalendarEvent repositories.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.event import CalendarEvent, Event
from calendarium.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """
    Repository for Event model operations.

    Extends BaseRepository with calendar-scoped reads. Every query joins the
    live CalendarEvent link, so an event is only visible through a calendar
    it is still attached to.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Event, session)

    async def get_in_calendar(self, event_id: int, calendar_id: int) -> Event | None:
        """Get a live event attached (live link) to ``calendar_id``."""
        query = (
            select(Event)
            .join(CalendarEvent, CalendarEvent.event_id == Event.event_id)
            .where(
                Event.event_id == event_id,
                CalendarEvent.calendar_id == calendar_id,
                Event.deleted_at.is_(None),
                CalendarEvent.deleted_at.is_(None),
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_in_range(
        self,
        calendar_id: int,
        start: datetime,
        end: datetime,
    ) -> list[Event]:
        """
        Get the live events of a calendar starting in ``[start, end)``.

        Returns:
            Events ordered by start ascending
        """
        query = (
            select(Event)
            .join(CalendarEvent, CalendarEvent.event_id == Event.event_id)
            .where(
                CalendarEvent.calendar_id == calendar_id,
                Event.deleted_at.is_(None),
                CalendarEvent.deleted_at.is_(None),
                Event.start >= start,
                Event.start < end,
            )
            .order_by(Event.start.asc(), Event.event_id.asc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_ids_in_calendar(self, calendar_id: int) -> list[int]:
        """Get the ids of live events attached to a calendar."""
        query = (
            select(Event.event_id)
            .join(CalendarEvent, CalendarEvent.event_id == Event.event_id)
            .where(
                CalendarEvent.calendar_id == calendar_id,
                Event.deleted_at.is_(None),
                CalendarEvent.deleted_at.is_(None),
            )
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())


class CalendarEventRepository(BaseRepository[CalendarEvent]):
    """Repository for event-to-calendar links."""

    def __init__(self, session: AsyncSession):
        super().__init__(CalendarEvent, session)
