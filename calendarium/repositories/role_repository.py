"""
Role repository for role and role-assignment operations.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.role import Role, UserRole
from calendarium.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """
    Repository for Role model operations.

    Extends BaseRepository with:
    - Name lookups (live roles only)
    - Listing ordered by name
    - Roles of a user through live assignments
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Role, session)

    async def get_by_name(self, name: str, exclude_id: int | None = None) -> Role | None:
        """
        Get the live role named ``name``.

        Args:
            name: Role name (exact match)
            exclude_id: Ignore this role id, used when renaming a role
        """
        query = select(Role).where(Role.name == name)
        if exclude_id is not None:
            query = query.where(Role.role_id != exclude_id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def get_all_roles(self) -> list[Role]:
        """Get all live roles ordered by name ascending."""
        query = self._apply_soft_delete_filter(select(Role)).order_by(Role.name)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_user_roles(self, user_id: int) -> list[Role]:
        """
        Get the live roles held by a user through live assignments.

        Returns:
            Roles ordered by name
        """
        query = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.role_id)
            .where(
                UserRole.user_id == user_id,
                UserRole.deleted_at.is_(None),
                Role.deleted_at.is_(None),
            )
            .order_by(Role.name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())


class UserRoleRepository(BaseRepository[UserRole]):
    """Repository for role assignments."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserRole, session)

    async def get_assignment(self, user_id: int, role_id: int) -> UserRole | None:
        """Get the live assignment of ``role_id`` to ``user_id``."""
        query = select(UserRole).where(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
        )
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()
