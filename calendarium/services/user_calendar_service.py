"""
User-calendar link service.

This module provides:
- The calendar access check
- Link CRUD keyed by (user_id, calendar_id)
- Listing a user's calendars
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.database import atomic, fetch_or_raise, map_db_error
from calendarium.exceptions import (
    CalendarAccessCheckError,
    CalendarNotFoundError,
    CalendarVerificationError,
    NoAccessToCalendarError,
    UserCalendarAlreadyExistsError,
    UserCalendarCreationError,
    UserCalendarDeleteError,
    UserCalendarListError,
    UserCalendarNotFoundError,
    UserCalendarUpdateError,
    UserNotFoundError,
    UserVerificationError,
)
from calendarium.models.calendar import Calendar, UserCalendar
from calendarium.repositories.calendar_repository import (
    CalendarRepository,
    UserCalendarRepository,
)
from calendarium.repositories.user_repository import UserRepository
from calendarium.schemas.calendar import UserCalendarListItem

logger = logging.getLogger(__name__)


class UserCalendarService:
    """Service class for user-calendar links and access checks."""

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock
        self.user_calendar_repo = UserCalendarRepository(session)
        self.user_repo = UserRepository(session)
        self.calendar_repo = CalendarRepository(session)

    async def check_access(self, user_id: int, calendar_id: int) -> None:
        """
        Require a live link between the user and the calendar.

        Raises:
            NoAccessToCalendarError: No live link
            CalendarAccessCheckError: The lookup failed
        """
        async with map_db_error(CalendarAccessCheckError):
            allowed = await self.user_calendar_repo.has_access(user_id, calendar_id)
        if not allowed:
            logger.warning(f"Access denied: user {user_id} has no link to calendar {calendar_id}")
            raise NoAccessToCalendarError()

    async def get_link(self, user_id: int, calendar_id: int) -> UserCalendar:
        return await fetch_or_raise(
            self.user_calendar_repo.get_link(user_id, calendar_id),
            UserCalendarNotFoundError,
            UserCalendarListError,
        )

    async def create_link(self, user_id: int, calendar_id: int) -> UserCalendar:
        """
        Link a user to a calendar.

        Both must be live. The check-then-insert is backed by a unique
        index on live pairs where the dialect supports it.

        Raises:
            UserNotFoundError / CalendarNotFoundError: Either side is not live
            UserCalendarAlreadyExistsError: A live link already exists
        """
        await fetch_or_raise(
            self.user_repo.get_by_id(user_id), UserNotFoundError, UserVerificationError
        )
        await fetch_or_raise(
            self.calendar_repo.get_by_id(calendar_id),
            CalendarNotFoundError,
            CalendarVerificationError,
        )

        async with map_db_error(UserCalendarListError):
            existing = await self.user_calendar_repo.get_link(user_id, calendar_id)
        if existing is not None:
            raise UserCalendarAlreadyExistsError()

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(
                UserCalendarCreationError, conflict=UserCalendarAlreadyExistsError
            ):
                link = await self.user_calendar_repo.add(
                    UserCalendar(user_id=user_id, calendar_id=calendar_id, created_at=now)
                )

        logger.info(f"User {user_id} linked to calendar {calendar_id}")
        return link

    async def touch_link(self, user_id: int, calendar_id: int) -> UserCalendar:
        """Refresh ``updated_at`` of a live link; nothing else is mutable."""
        link = await self.get_link(user_id, calendar_id)
        link.updated_at = self.clock.now()

        async with atomic(self.session):
            async with map_db_error(UserCalendarUpdateError):
                link = await self.user_calendar_repo.update(link)
        return link

    async def delete_link(self, user_id: int, calendar_id: int) -> None:
        link = await self.get_link(user_id, calendar_id)

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(UserCalendarDeleteError):
                await self.user_calendar_repo.soft_delete(link, now)

        logger.info(f"User {user_id} unlinked from calendar {calendar_id}")

    async def list_links(self, user_id: int) -> list[UserCalendarListItem]:
        """A user's live links with their calendars' title and description."""
        async with map_db_error(UserCalendarListError):
            rows = await self.user_calendar_repo.list_for_user(user_id)

        return [_list_item(link, calendar) for link, calendar in rows]


def _list_item(link: UserCalendar, calendar: Calendar) -> UserCalendarListItem:
    return UserCalendarListItem(
        user_calendar_id=link.user_calendar_id,
        user_id=link.user_id,
        calendar_id=link.calendar_id,
        created_at=link.created_at,
        updated_at=link.updated_at,
        title=calendar.title,
        description=calendar.description,
    )
