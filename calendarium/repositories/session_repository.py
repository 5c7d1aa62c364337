"""
UserSession repository for authentication session operations.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.session import UserSession
from calendarium.models.user import User
from calendarium.repositories.base import BaseRepository


class SessionRepository(BaseRepository[UserSession]):
    """
    Repository for UserSession model operations.

    Extends BaseRepository with:
    - Token lookups (session and refresh tokens)
    - Logout deactivation
    - Per-user listing and ownership checks
    """

    def __init__(self, session: AsyncSession):
        super().__init__(UserSession, session)

    async def get_active_with_user(self, session_token: str) -> tuple[UserSession, User] | None:
        """
        Get an active, live session and its live user by session token.

        Expiry is not filtered here so the caller can tell an expired
        session from an unknown one.
        """
        query = (
            select(UserSession, User)
            .join(User, User.user_id == UserSession.user_id)
            .where(
                UserSession.session_token == session_token,
                UserSession.is_active.is_(True),
                UserSession.deleted_at.is_(None),
                User.deleted_at.is_(None),
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def get_active_by_refresh_token(self, refresh_token: str) -> UserSession | None:
        """Get the active, live session holding ``refresh_token``."""
        query = select(UserSession).where(
            UserSession.refresh_token == refresh_token,
            UserSession.is_active.is_(True),
        )
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def deactivate_by_token(self, session_token: str, now: datetime) -> int:
        """
        Mark the active session holding ``session_token`` inactive.

        Returns:
            Number of sessions deactivated (0 when already logged out)
        """
        result = await self.session.execute(
            update(UserSession)
            .where(
                UserSession.session_token == session_token,
                UserSession.is_active.is_(True),
            )
            .values(is_active=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return result.rowcount

    async def deactivate_user_sessions(self, user_id: int, now: datetime) -> int:
        """Mark every active session of a user inactive (account deletion)."""
        result = await self.session.execute(
            update(UserSession)
            .where(
                UserSession.user_id == user_id,
                UserSession.is_active.is_(True),
            )
            .values(is_active=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return result.rowcount

    async def list_for_user(self, user_id: int) -> list[UserSession]:
        """Get the live sessions of a user, newest first."""
        query = (
            self._apply_soft_delete_filter(select(UserSession))
            .where(UserSession.user_id == user_id)
            .order_by(UserSession.created_at.desc(), UserSession.user_session_id.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_owned(self, user_session_id: int, user_id: int) -> UserSession | None:
        """Get a live session only if it belongs to ``user_id``."""
        query = select(UserSession).where(
            UserSession.user_session_id == user_session_id,
            UserSession.user_id == user_id,
        )
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()
