"""
API routes for Calendarium.

This package contains all API endpoint definitions organized by resource.
"""

from calendarium.api.routes import (
    auth,
    calendar_events,
    calendars,
    health,
    roles,
    root,
    user_calendars,
    users,
)

__all__ = [
    "auth",
    "calendar_events",
    "calendars",
    "health",
    "roles",
    "root",
    "user_calendars",
    "users",
]
