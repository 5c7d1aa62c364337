"""
FastAPI dependencies for authentication, authorization and resource resolution.

This module provides:
- The per-request context shared by dependencies and handlers
- Bearer session authentication (required and optional)
- Admin and role gates
- Path parameter resolvers for users, calendars and events
- The user-calendar access check
- Service factories bound to the request session and clock

A typical calendar-scoped route resolves, in order:
``require_auth -> resolve_calendar -> require_calendar_access -> resolve_event``.
Every step raises an AppException, which stops dispatch.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock, get_clock
from calendarium.core.database import fetch_or_raise, get_db
from calendarium.exceptions import (
    AppException,
    AuthenticationError,
    CalendarNotFoundError,
    CalendarVerificationError,
    EventNotFoundError,
    EventVerificationError,
    InsufficientPermissionsError,
    InvalidCalendarIDError,
    InvalidEventIDError,
    InvalidUserIDError,
    NotFoundError,
    SessionInvalidError,
    UserNotAuthenticatedError,
    UserNotFoundError,
    UserVerificationError,
)
from calendarium.models.calendar import Calendar
from calendarium.models.event import Event
from calendarium.models.role import ADMIN_ROLE, Role
from calendarium.models.user import User
from calendarium.repositories.calendar_repository import CalendarRepository
from calendarium.repositories.event_repository import EventRepository
from calendarium.repositories.user_repository import UserRepository
from calendarium.services import (
    AuthService,
    CalendarService,
    EventService,
    RoleService,
    UserCalendarService,
    UserService,
)

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Session token returned by /auth/login",
    auto_error=False,
)


# ============================================================================
# Request Context
# ============================================================================


@dataclass
class RequestContext:
    """
    Values resolved for the current request.

    The authenticated user and the user loaded from a path parameter are
    separate slots: an admin acting on ``/user/{user_id}`` has both, and
    they must never alias.
    """

    auth_user: User | None = None
    auth_roles: list[Role] = field(default_factory=list)
    session_token: str | None = None
    user: User | None = None
    calendar: Calendar | None = None
    event: Event | None = None

    @property
    def role_names(self) -> set[str]:
        return {role.name for role in self.auth_roles}


def get_context(request: Request) -> RequestContext:
    """Return the request's context, creating it on first use."""
    context = getattr(request.state, "context", None)
    if context is None:
        context = RequestContext()
        request.state.context = context
    return context


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppClock = Annotated[Clock, Depends(get_clock)]
Context = Annotated[RequestContext, Depends(get_context)]


# ============================================================================
# Service Dependencies
# ============================================================================


def get_auth_service(db: DbSession, clock: AppClock) -> AuthService:
    return AuthService(db, clock)


def get_user_service(db: DbSession, clock: AppClock) -> UserService:
    return UserService(db, clock)


def get_role_service(db: DbSession, clock: AppClock) -> RoleService:
    return RoleService(db, clock)


def get_calendar_service(db: DbSession, clock: AppClock) -> CalendarService:
    return CalendarService(db, clock)


def get_event_service(db: DbSession, clock: AppClock) -> EventService:
    return EventService(db, clock)


def get_user_calendar_service(db: DbSession, clock: AppClock) -> UserCalendarService:
    return UserCalendarService(db, clock)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
RoleServiceDep = Annotated[RoleService, Depends(get_role_service)]
CalendarServiceDep = Annotated[CalendarService, Depends(get_calendar_service)]
EventServiceDep = Annotated[EventService, Depends(get_event_service)]
UserCalendarServiceDep = Annotated[UserCalendarService, Depends(get_user_calendar_service)]


# ============================================================================
# Authentication
# ============================================================================


async def require_auth(
    context: Context,
    auth_service: AuthServiceDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """
    Dependency authenticating the request from its bearer session token.

    This dependency:
    1. Requires an ``Authorization: Bearer <token>`` header
    2. Validates the session (active, live, not expired, live user)
    3. Loads the user's live roles
    4. Stores user, roles and token in the request context

    Returns:
        The authenticated user

    Raises:
        UserNotAuthenticatedError (401): Header missing or malformed
        SessionInvalidError (401): The token does not resolve to a valid session

    Usage:
        @router.get("/auth/me")
        async def me(current_user: AuthUser):
            ...
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Authentication failed: missing Bearer token")
        raise UserNotAuthenticatedError()

    token = credentials.credentials
    try:
        user = await auth_service.validate_session(token)
    except (AuthenticationError, NotFoundError) as e:
        logger.warning(f"Authentication failed: {e.error_code}")
        raise SessionInvalidError() from e

    context.auth_user = user
    context.auth_roles = await auth_service.get_user_roles(user.user_id)
    context.session_token = token
    return user


async def optional_auth(
    context: Context,
    auth_service: AuthServiceDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """
    Same as ``require_auth`` but never fails.

    Any failure leaves the context untouched and yields None.
    """
    if credentials is None or not credentials.credentials:
        return None

    try:
        user = await auth_service.validate_session(credentials.credentials)
        roles = await auth_service.get_user_roles(user.user_id)
    except AppException as e:
        logger.debug(f"Optional authentication skipped: {e.error_code}")
        return None

    context.auth_user = user
    context.auth_roles = roles
    context.session_token = credentials.credentials
    return user


AuthUser = Annotated[User, Depends(require_auth)]
OptionalUser = Annotated[User | None, Depends(optional_auth)]


# ============================================================================
# Authorization Gates
# ============================================================================


@lru_cache
def require_roles(*names: str) -> Callable[..., Awaitable[User]]:
    """
    Build a dependency admitting users holding at least one of ``names``.

    Factories are cached so that one gate is one dependency for FastAPI's
    per-request dependency cache.

    Usage:
        @router.get("/reports", dependencies=[Depends(require_roles("admin", "auditor"))])
    """
    allowed = frozenset(names)

    async def role_gate(current_user: AuthUser, context: Context) -> User:
        if context.role_names.isdisjoint(allowed):
            logger.warning(
                f"Access denied: user {current_user.user_id} lacks any of {sorted(allowed)}"
            )
            raise InsufficientPermissionsError()
        return current_user

    return role_gate


def require_role(name: str) -> Callable[..., Awaitable[User]]:
    """Build a dependency admitting users holding role ``name``."""
    return require_roles(name)


require_admin = require_role(ADMIN_ROLE)

AdminUser = Annotated[User, Depends(require_admin)]


# ============================================================================
# Path Parameter Resolvers
# ============================================================================


def parse_path_id(request: Request, param: str, error: type[AppException]) -> int:
    """Read an integer id from the path, raising ``error`` when it is not one."""
    raw = request.path_params.get(param)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise error() from None


@lru_cache
def require_user(param: str = "user_id") -> Callable[..., Awaitable[User]]:
    """
    Build a dependency loading the live user whose id is in path ``param``.

    Raises:
        InvalidUserIDError (400): Not an integer
        UserNotFoundError (404): No live user
        UserVerificationError (500): Lookup failed
    """

    async def user_resolver(request: Request, db: DbSession, context: Context) -> User:
        user_id = parse_path_id(request, param, InvalidUserIDError)
        user = await fetch_or_raise(
            UserRepository(db).get_by_id(user_id),
            UserNotFoundError,
            UserVerificationError,
        )
        context.user = user
        return user

    return user_resolver


@lru_cache
def require_calendar(param: str = "calendar_id") -> Callable[..., Awaitable[Calendar]]:
    """
    Build a dependency loading the live calendar whose id is in path ``param``.

    Raises:
        InvalidCalendarIDError (400): Not an integer
        CalendarNotFoundError (404): No live calendar
        CalendarVerificationError (500): Lookup failed
    """

    async def calendar_resolver(request: Request, db: DbSession, context: Context) -> Calendar:
        calendar_id = parse_path_id(request, param, InvalidCalendarIDError)
        calendar = await fetch_or_raise(
            CalendarRepository(db).get_by_id(calendar_id),
            CalendarNotFoundError,
            CalendarVerificationError,
        )
        context.calendar = calendar
        return calendar

    return calendar_resolver


resolve_user = require_user("user_id")
resolve_calendar = require_calendar("calendar_id")

ResolvedUser = Annotated[User, Depends(resolve_user)]
ResolvedCalendar = Annotated[Calendar, Depends(resolve_calendar)]


async def require_calendar_access(
    current_user: AuthUser,
    calendar: ResolvedCalendar,
    user_calendar_service: UserCalendarServiceDep,
) -> Calendar:
    """
    Require a live link between the authenticated user and the path calendar.

    Raises:
        NoAccessToCalendarError (403): No live link
        CalendarAccessCheckError (500): Lookup failed
    """
    await user_calendar_service.check_access(current_user.user_id, calendar.calendar_id)
    return calendar


AccessibleCalendar = Annotated[Calendar, Depends(require_calendar_access)]


@lru_cache
def require_event(param: str = "event_id") -> Callable[..., Awaitable[Event]]:
    """
    Build a dependency loading the live event in path ``param``.

    The event must be attached to the (already access-checked) path
    calendar; an event of another calendar is reported as not found.

    Raises:
        InvalidEventIDError (400): Not an integer
        EventNotFoundError (404): No live event in this calendar
        EventVerificationError (500): Lookup failed
    """

    async def event_resolver(
        request: Request,
        db: DbSession,
        context: Context,
        calendar: AccessibleCalendar,
    ) -> Event:
        event_id = parse_path_id(request, param, InvalidEventIDError)
        event = await fetch_or_raise(
            EventRepository(db).get_in_calendar(event_id, calendar.calendar_id),
            EventNotFoundError,
            EventVerificationError,
        )
        context.event = event
        return event

    return event_resolver


resolve_event = require_event("event_id")

ResolvedEvent = Annotated[Event, Depends(resolve_event)]
