"""
Calendarium - calendaring backend.

HTTP/JSON API for users, sessions, roles, calendars, events and
user-calendar sharing.
"""

__version__ = "0.1.0"
