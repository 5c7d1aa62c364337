"""
Role service for role administration.

This module provides:
- Role CRUD (list, get, create, update, delete)
- Role assignment and revocation
- Listing a user's roles
- Seeding of the default roles at startup
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.database import atomic, fetch_or_raise, map_db_error
from calendarium.exceptions import (
    AppException,
    InvalidDataError,
    RoleAlreadyAssignedError,
    RoleAlreadyExistsError,
    RoleAssignmentError,
    RoleAssignmentNotFoundError,
    RoleCreationError,
    RoleDeleteError,
    RoleListError,
    RoleNotFoundError,
    RoleRevocationError,
    RoleUpdateError,
    UserNotFoundError,
    UserVerificationError,
)
from calendarium.models.role import DEFAULT_ROLES, Role, UserRole
from calendarium.models.user import User
from calendarium.repositories.role_repository import RoleRepository, UserRoleRepository
from calendarium.repositories.user_repository import UserRepository
from calendarium.schemas.role import RoleCreate, RoleUpdate

logger = logging.getLogger(__name__)


def parse_role_id(raw: str | int) -> int:
    """
    Parse a role id from the path.

    A non-numeric id cannot match any role, so it is reported as
    RoleNotFound rather than as malformed input.
    """
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise RoleNotFoundError() from None


class RoleService:
    """
    Service class for role operations. Every endpoint using it is
    admin-gated.
    """

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock
        self.role_repo = RoleRepository(session)
        self.user_role_repo = UserRoleRepository(session)
        self.user_repo = UserRepository(session)

    async def list_roles(self) -> list[Role]:
        """Get all live roles ordered by name."""
        async with map_db_error(RoleListError):
            return await self.role_repo.get_all_roles()

    async def get_role(self, role_id: str | int) -> Role:
        """
        Get a live role.

        Raises:
            RoleNotFoundError: Unknown, deleted, or non-numeric id
        """
        return await fetch_or_raise(
            self.role_repo.get_by_id(parse_role_id(role_id)),
            RoleNotFoundError,
            RoleListError,
        )

    async def create_role(self, data: RoleCreate) -> Role:
        """
        Create a role.

        Raises:
            InvalidDataError: Blank name
            RoleAlreadyExistsError: A live role has this name
        """
        name = data.name.strip()
        if not name:
            raise InvalidDataError()

        async with map_db_error(RoleListError):
            existing = await self.role_repo.get_by_name(name)
        if existing is not None:
            logger.warning(f"Role creation rejected: '{name}' already exists")
            raise RoleAlreadyExistsError()

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(RoleCreationError, conflict=RoleAlreadyExistsError):
                role = await self.role_repo.add(
                    Role(name=name, description=data.description, created_at=now)
                )

        logger.info(f"Role created: {role.role_id} ({role.name})")
        return role

    async def update_role(self, role_id: str | int, data: RoleUpdate) -> Role:
        """
        Apply a partial update to a role.

        The new name, when given, must be free among the other live roles.
        ``updated_at`` always advances.
        """
        role = await self.get_role(role_id)

        if data.name is not None:
            name = data.name.strip()
            if not name:
                raise InvalidDataError()
            async with map_db_error(RoleListError):
                other = await self.role_repo.get_by_name(name, exclude_id=role.role_id)
            if other is not None:
                logger.warning(f"Role rename rejected: '{name}' already exists")
                raise RoleAlreadyExistsError()
            role.name = name
        if "description" in data.model_fields_set:
            role.description = data.description
        role.updated_at = self.clock.now()

        async with atomic(self.session):
            async with map_db_error(RoleUpdateError, conflict=RoleAlreadyExistsError):
                role = await self.role_repo.update(role)

        logger.info(f"Role updated: {role.role_id}")
        return role

    async def delete_role(self, role_id: str | int) -> None:
        """
        Soft-delete a role, then its assignments.

        The role deletion is committed on its own first. Clearing the
        assignments is a second step whose failure is logged and does not
        fail the request: a deleted role grants nothing anyway because role
        lookups join live roles only.
        """
        role = await self.get_role(role_id)

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(RoleDeleteError):
                await self.role_repo.soft_delete(role, now)
        logger.info(f"Role deleted: {role.role_id} ({role.name})")

        try:
            async with atomic(self.session):
                async with map_db_error(RoleDeleteError):
                    count = await self.user_role_repo.soft_delete_where(
                        UserRole.role_id == role.role_id, now=now
                    )
        except AppException as e:
            logger.warning(
                f"Role {role.role_id} deleted but its assignments were not cleared: {e.message}"
            )
            return
        logger.info(f"Cleared {count} assignment(s) of role {role.role_id}")

    async def _get_user(self, user_id: int) -> User:
        return await fetch_or_raise(
            self.user_repo.get_by_id(user_id),
            UserNotFoundError,
            UserVerificationError,
        )

    async def assign_role(self, user_id: int, role_id: int) -> UserRole:
        """
        Give a role to a user.

        Raises:
            UserNotFoundError / RoleNotFoundError: Either side is not live
            RoleAlreadyAssignedError: The user already holds the role
        """
        await self._get_user(user_id)
        await self.get_role(role_id)

        async with map_db_error(RoleAssignmentError):
            existing = await self.user_role_repo.get_assignment(user_id, role_id)
        if existing is not None:
            raise RoleAlreadyAssignedError()

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(RoleAssignmentError, conflict=RoleAlreadyAssignedError):
                assignment = await self.user_role_repo.add(
                    UserRole(user_id=user_id, role_id=role_id, created_at=now)
                )

        logger.info(f"Role {role_id} assigned to user {user_id}")
        return assignment

    async def revoke_role(self, user_id: int, role_id: int) -> None:
        """
        Take a role away from a user.

        Raises:
            RoleAssignmentNotFoundError: The user does not hold the role
        """
        assignment = await fetch_or_raise(
            self.user_role_repo.get_assignment(user_id, role_id),
            RoleAssignmentNotFoundError,
            RoleRevocationError,
        )

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(RoleRevocationError):
                await self.user_role_repo.soft_delete(assignment, now)

        logger.info(f"Role {role_id} revoked from user {user_id}")

    async def get_user_roles(self, user_id: int) -> list[Role]:
        """Get the live roles of a live user."""
        await self._get_user(user_id)
        async with map_db_error(RoleListError):
            return await self.role_repo.get_user_roles(user_id)

    async def ensure_default_roles(self) -> list[str]:
        """
        Create the default roles that are missing.

        Returns:
            Names of the roles created
        """
        created = []
        now = self.clock.now()
        try:
            async with atomic(self.session):
                for name, description in DEFAULT_ROLES.items():
                    if await self.role_repo.get_by_name(name) is None:
                        await self.role_repo.add(
                            Role(name=name, description=description, created_at=now)
                        )
                        created.append(name)
        except SQLAlchemyError as e:
            raise RoleCreationError() from e

        if created:
            logger.info(f"Seeded default roles: {', '.join(created)}")
        return created
