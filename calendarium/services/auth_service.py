"""
Authentication service for session management.

This module provides:
- Login with opaque session and refresh tokens
- Logout (session deactivation)
- Session token refresh
- Session validation for the auth dependency
- Listing and deleting the caller's sessions
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.config import settings
from calendarium.core.database import atomic, fetch_or_raise, map_db_error
from calendarium.core.geolocation import locate
from calendarium.core.security import MASKED_TOKEN, generate_token, verify_password
from calendarium.exceptions import (
    InvalidCredentialsError,
    SessionCreationError,
    SessionDeleteError,
    SessionExpiredError,
    SessionInvalidError,
    SessionListError,
    SessionNotFoundError,
    SessionUpdateError,
    SessionValidationError,
    UserVerificationError,
)
from calendarium.models.role import Role
from calendarium.models.session import UserSession
from calendarium.models.user import User
from calendarium.repositories.role_repository import RoleRepository
from calendarium.repositories.session_repository import SessionRepository
from calendarium.repositories.user_repository import UserRepository
from calendarium.schemas.auth import SessionResponse

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """Everything a successful login hands back to the client."""

    user: User
    session: UserSession
    roles: list[Role]


class AuthService:
    """
    Service class for session operations.

    This service handles:
    - Login and session creation
    - Logout
    - Session token refresh
    - Session validation
    - Session listing and deletion

    Args:
        session: Request database session
        clock: Source of every timestamp written
        token_factory: Opaque token generator
        locator: IP to location lookup used at login
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock,
        token_factory: Callable[[], str] = generate_token,
        locator: Callable[[str | None], Awaitable[str | None]] = locate,
    ):
        self.session = session
        self.clock = clock
        self.token_factory = token_factory
        self.locator = locator
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.session_repo = SessionRepository(session)

    @property
    def session_ttl(self) -> timedelta:
        return timedelta(minutes=settings.session_ttl_minutes)

    async def login(
        self,
        email: str,
        password: str,
        device_info: str | None = None,
        ip_address: str | None = None,
    ) -> LoginResult:
        """
        Authenticate a user and open a session.

        Unknown email and wrong password raise the same error so that the
        response does not reveal whether the account exists.

        Args:
            email: Login email
            password: Plain password
            device_info: User-Agent of the client
            ip_address: Client address

        Returns:
            LoginResult with the user, the new session and the user's roles

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            SessionCreationError: The session row could not be written

        Example:
            result = await auth_service.login(
                email="j@x.io",
                password="secret1",
                device_info=request.headers.get("User-Agent"),
                ip_address=request.client.host,
            )
        """
        async with map_db_error(UserVerificationError):
            credentials = await self.user_repo.get_with_password(email)

        if credentials is None:
            logger.warning("Login failed: no live user for submitted email")
            raise InvalidCredentialsError()

        user, user_password = credentials
        if not verify_password(password, user_password.password_hash):
            logger.warning(f"Login failed: invalid password for user {user.user_id}")
            raise InvalidCredentialsError()

        async with map_db_error(UserVerificationError):
            roles = await self.role_repo.get_user_roles(user.user_id)

        session_token = self.token_factory()
        refresh_token = self.token_factory()
        location = await self.locator(ip_address)

        now = self.clock.now()
        user_session = UserSession(
            user_id=user.user_id,
            session_token=session_token,
            refresh_token=refresh_token,
            expires_at=now + self.session_ttl,
            device_info=device_info[:255] if device_info else None,
            ip_address=ip_address,
            location=location,
            is_active=True,
            created_at=now,
        )

        async with atomic(self.session):
            async with map_db_error(SessionCreationError):
                user_session = await self.session_repo.add(user_session)

        logger.info(f"User logged in: {user.user_id} (session {user_session.user_session_id})")
        return LoginResult(user=user, session=user_session, roles=roles)

    async def logout(self, session_token: str) -> None:
        """
        Deactivate the active session holding ``session_token``.

        Logging out an already inactive session is not an error.
        """
        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(SessionUpdateError):
                count = await self.session_repo.deactivate_by_token(session_token, now)

        if count:
            logger.info("Session logged out")
        else:
            logger.info("Logout for a session that was already inactive")

    async def refresh(self, refresh_token: str) -> UserSession:
        """
        Issue a new session token for the session holding ``refresh_token``.

        The same session row is updated: new session_token, new expiry,
        refresh token unchanged. The previous session token stops matching.

        Raises:
            SessionInvalidError: No active, live session has this refresh token
            SessionExpiredError: The session has already expired
        """
        async with map_db_error(SessionValidationError):
            user_session = await self.session_repo.get_active_by_refresh_token(refresh_token)

        if user_session is None:
            logger.warning("Token refresh failed: unknown or inactive refresh token")
            raise SessionInvalidError()

        now = self.clock.now()
        if user_session.expires_at <= now:
            logger.warning(f"Token refresh failed: session {user_session.user_session_id} expired")
            raise SessionExpiredError()

        user_session.session_token = self.token_factory()
        user_session.expires_at = now + self.session_ttl
        user_session.updated_at = now

        async with atomic(self.session):
            async with map_db_error(SessionUpdateError):
                user_session = await self.session_repo.update(user_session)

        logger.info(f"Session token refreshed: session {user_session.user_session_id}")
        return user_session

    async def validate_session(self, session_token: str) -> User:
        """
        Resolve a bearer token to its live user.

        A token is valid iff its session is active, live, not expired, and
        its user is live.

        Raises:
            SessionNotFoundError: No active, live session for a live user
            SessionExpiredError: The session has expired
            SessionValidationError: The lookup itself failed
        """
        user_session, user = await fetch_or_raise(
            self.session_repo.get_active_with_user(session_token),
            SessionNotFoundError,
            SessionValidationError,
        )
        if user_session.expires_at <= self.clock.now():
            raise SessionExpiredError()
        return user

    async def get_user_roles(self, user_id: int) -> list[Role]:
        async with map_db_error(SessionValidationError):
            return await self.role_repo.get_user_roles(user_id)

    async def list_sessions(self, user_id: int) -> list[SessionResponse]:
        """
        List the live sessions of a user, newest first.

        Session tokens are replaced by a sentinel; refresh tokens are not
        part of the response schema at all.
        """
        async with map_db_error(SessionListError):
            sessions = await self.session_repo.list_for_user(user_id)

        return [
            SessionResponse.model_validate(s).model_copy(update={"session_token": MASKED_TOKEN})
            for s in sessions
        ]

    async def delete_session(self, user_id: int, session_id: str | int) -> None:
        """
        Soft-delete one of the caller's sessions.

        Raises:
            SessionNotFoundError: The id is not a live session of this user
                (including an id that is not a number)
        """
        try:
            user_session_id = int(session_id)
        except (TypeError, ValueError):
            raise SessionNotFoundError() from None

        user_session = await fetch_or_raise(
            self.session_repo.get_owned(user_session_id, user_id),
            SessionNotFoundError,
            SessionDeleteError,
        )

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(SessionDeleteError):
                await self.session_repo.soft_delete(user_session, now)

        logger.info(f"Session {user_session_id} deleted by user {user_id}")
