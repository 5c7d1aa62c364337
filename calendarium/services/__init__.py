"""
Service layer: business rules and transaction boundaries.
"""

from calendarium.services.auth_service import AuthService, LoginResult
from calendarium.services.calendar_service import CalendarService
from calendarium.services.event_service import EventService
from calendarium.services.role_service import RoleService
from calendarium.services.user_calendar_service import UserCalendarService
from calendarium.services.user_service import UserService

__all__ = [
    "AuthService",
    "LoginResult",
    "CalendarService",
    "EventService",
    "RoleService",
    "UserCalendarService",
    "UserService",
]
