"""
User repository for user and credential database operations.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.user import User, UserPassword
from calendarium.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    Repository for User model operations.

    Extends BaseRepository with:
    - Email lookups (live users only)
    - Credential lookup joining the live password row
    """

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str, exclude_id: int | None = None) -> User | None:
        """
        Get the live user holding ``email``.

        Args:
            email: Email to look up (exact match)
            exclude_id: Ignore this user id, used when a user changes email

        Returns:
            User instance or None if not found
        """
        query = select(User).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.user_id != exclude_id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def get_with_password(self, email: str) -> tuple[User, UserPassword] | None:
        """
        Get a live user together with their live password row.

        Used by login. Returns None when the email is unknown or the user
        has no live password, which login reports the same way as a wrong
        password.
        """
        query = (
            select(User, UserPassword)
            .join(UserPassword, UserPassword.user_id == User.user_id)
            .where(
                User.email == email,
                User.deleted_at.is_(None),
                UserPassword.deleted_at.is_(None),
            )
            .limit(1)
        )
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]


class UserPasswordRepository(BaseRepository[UserPassword]):
    """Repository for UserPassword rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserPassword, session)

    async def get_for_user(self, user_id: int) -> UserPassword | None:
        """Get the live password row of a user."""
        query = select(UserPassword).where(UserPassword.user_id == user_id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()
