"""
Repositories: the only layer issuing SQL.
"""

from calendarium.repositories.base import BaseRepository
from calendarium.repositories.calendar_repository import (
    CalendarRepository,
    UserCalendarRepository,
)
from calendarium.repositories.event_repository import CalendarEventRepository, EventRepository
from calendarium.repositories.role_repository import RoleRepository, UserRoleRepository
from calendarium.repositories.session_repository import SessionRepository
from calendarium.repositories.user_repository import UserPasswordRepository, UserRepository

__all__ = [
    "BaseRepository",
    "CalendarRepository",
    "UserCalendarRepository",
    "EventRepository",
    "CalendarEventRepository",
    "RoleRepository",
    "UserRoleRepository",
    "SessionRepository",
    "UserRepository",
    "UserPasswordRepository",
]
