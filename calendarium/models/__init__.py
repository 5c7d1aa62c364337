"""
Database models for Calendarium.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure proper initialization.
"""

from calendarium.models.base import Base, UTCDateTime
from calendarium.models.calendar import Calendar, UserCalendar
from calendarium.models.event import CalendarEvent, Event
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin
from calendarium.models.role import ADMIN_ROLE, DEFAULT_ROLES, USER_ROLE, Role, UserRole
from calendarium.models.session import UserSession
from calendarium.models.user import User, UserPassword

__all__ = [
    # Base
    "Base",
    "UTCDateTime",
    # Mixins
    "TimestampMixin",
    "SoftDeleteMixin",
    # User models
    "User",
    "UserPassword",
    # Role models
    "Role",
    "UserRole",
    "ADMIN_ROLE",
    "USER_ROLE",
    "DEFAULT_ROLES",
    # Session models
    "UserSession",
    # Calendar models
    "Calendar",
    "UserCalendar",
    "Event",
    "CalendarEvent",
]
