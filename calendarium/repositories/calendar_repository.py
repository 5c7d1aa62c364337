"""
Calendar and UserCalendar repositories.
"""

from sqlalchemy import literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.calendar import Calendar, UserCalendar
from calendarium.repositories.base import BaseRepository


class CalendarRepository(BaseRepository[Calendar]):
    """Repository for Calendar model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Calendar, session)


class UserCalendarRepository(BaseRepository[UserCalendar]):
    """
    Repository for user-calendar access links.

    Extends BaseRepository with:
    - Pair lookups (user_id, calendar_id)
    - The access check used before every calendar-scoped operation
    - Listing a user's calendars
    """

    def __init__(self, session: AsyncSession):
        super().__init__(UserCalendar, session)

    async def get_link(self, user_id: int, calendar_id: int) -> UserCalendar | None:
        """Get the live link between ``user_id`` and ``calendar_id``."""
        query = select(UserCalendar).where(
            UserCalendar.user_id == user_id,
            UserCalendar.calendar_id == calendar_id,
        )
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def has_access(self, user_id: int, calendar_id: int) -> bool:
        """
        True iff a live link exists for the pair.

        Selects a constant rather than the row: only existence matters.
        """
        query = (
            select(literal(1))
            .select_from(UserCalendar)
            .where(
                UserCalendar.user_id == user_id,
                UserCalendar.calendar_id == calendar_id,
                UserCalendar.deleted_at.is_(None),
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def list_for_user(self, user_id: int) -> list[tuple[UserCalendar, Calendar]]:
        """
        Get a user's live links with their live calendars, newest first.
        """
        query = (
            select(UserCalendar, Calendar)
            .join(Calendar, Calendar.calendar_id == UserCalendar.calendar_id)
            .where(
                UserCalendar.user_id == user_id,
                UserCalendar.deleted_at.is_(None),
                Calendar.deleted_at.is_(None),
            )
            .order_by(UserCalendar.created_at.desc(), UserCalendar.user_calendar_id.desc())
        )
        result = await self.session.execute(query)
        return [(row[0], row[1]) for row in result.all()]
