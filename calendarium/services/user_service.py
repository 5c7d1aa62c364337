"""
User service for account management.

This module provides:
- Signup (user + password row + default role, in one transaction)
- Profile read with roles
- Partial profile update, including email and password changes
- Account deletion with credential fan-out
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.core.clock import Clock
from calendarium.core.database import atomic, map_db_error
from calendarium.core.security import (
    hash_password,
    normalize_email,
    validate_password_length,
)
from calendarium.exceptions import (
    UserAlreadyExistsError,
    UserCreationError,
    UserDeleteError,
    UserUpdateError,
    UserVerificationError,
)
from calendarium.models.role import USER_ROLE, Role, UserRole
from calendarium.models.user import User, UserPassword
from calendarium.repositories.role_repository import RoleRepository, UserRoleRepository
from calendarium.repositories.session_repository import SessionRepository
from calendarium.repositories.user_repository import UserPasswordRepository, UserRepository
from calendarium.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Service class for user account operations.

    Email uniqueness among live users is checked here before every write;
    on dialects with partial indexes a unique index backs the check.
    """

    def __init__(self, session: AsyncSession, clock: Clock):
        self.session = session
        self.clock = clock
        self.user_repo = UserRepository(session)
        self.password_repo = UserPasswordRepository(session)
        self.role_repo = RoleRepository(session)
        self.user_role_repo = UserRoleRepository(session)
        self.session_repo = SessionRepository(session)

    async def create_user(self, data: UserCreate) -> User:
        """
        Sign a new user up.

        In one transaction: insert the user, insert their password hash,
        and assign the ``user`` role when it exists.

        Args:
            data: Validated signup payload

        Returns:
            The created user

        Raises:
            PasswordTooShortError: Password below the minimum length
            UserAlreadyExistsError: A live user already has this email
            UserCreationError: A write failed

        Example:
            user = await user_service.create_user(
                UserCreate(lastname="D", firstname="J", email="j@x.io", password="secret1")
            )
        """
        validate_password_length(data.password)

        async with map_db_error(UserVerificationError):
            existing = await self.user_repo.get_by_email(data.email)
        if existing is not None:
            logger.warning("Signup rejected: email already registered")
            raise UserAlreadyExistsError()

        password_hash = hash_password(data.password)

        async with map_db_error(UserVerificationError):
            default_role = await self.role_repo.get_by_name(USER_ROLE)

        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(UserCreationError, conflict=UserAlreadyExistsError):
                user = await self.user_repo.add(
                    User(
                        lastname=data.lastname,
                        firstname=data.firstname,
                        email=data.email,
                        created_at=now,
                    )
                )
                await self.password_repo.add(
                    UserPassword(user_id=user.user_id, password_hash=password_hash, created_at=now)
                )
                if default_role is not None:
                    await self.user_role_repo.add(
                        UserRole(user_id=user.user_id, role_id=default_role.role_id, created_at=now)
                    )

        if default_role is None:
            logger.warning(f"Role '{USER_ROLE}' missing; user {user.user_id} created without roles")

        logger.info(f"User created: {user.user_id}")
        return user

    async def get_roles(self, user: User) -> list[Role]:
        async with map_db_error(UserVerificationError):
            return await self.role_repo.get_user_roles(user.user_id)

    async def update_user(self, user: User, data: UserUpdate) -> User:
        """
        Apply a partial update to ``user``.

        Only supplied fields change; ``updated_at`` advances even when none
        is supplied. A new password rewrites the live password row.

        Raises:
            InvalidEmailFormatError: Email does not look like an address
            PasswordTooShortError: Password below the minimum length
            UserAlreadyExistsError: Another live user has this email
            UserUpdateError: A write failed
        """
        email = normalize_email(data.email) if data.email is not None else None
        if data.password is not None:
            validate_password_length(data.password)

        if email is not None and email != user.email:
            async with map_db_error(UserVerificationError):
                other = await self.user_repo.get_by_email(email, exclude_id=user.user_id)
            if other is not None:
                logger.warning(f"Email change rejected for user {user.user_id}: already in use")
                raise UserAlreadyExistsError()

        password_hash = hash_password(data.password) if data.password is not None else None

        now = self.clock.now()
        if data.lastname is not None:
            user.lastname = data.lastname
        if data.firstname is not None:
            user.firstname = data.firstname
        if email is not None:
            user.email = email
        user.updated_at = now

        async with atomic(self.session):
            async with map_db_error(UserUpdateError, conflict=UserAlreadyExistsError):
                user = await self.user_repo.update(user)
                if password_hash is not None:
                    await self._replace_password(user.user_id, password_hash, now)

        logger.info(f"User updated: {user.user_id}")
        return user

    async def _replace_password(self, user_id: int, password_hash: str, now: datetime) -> None:
        user_password = await self.password_repo.get_for_user(user_id)
        if user_password is None:
            await self.password_repo.add(
                UserPassword(user_id=user_id, password_hash=password_hash, created_at=now)
            )
            return
        user_password.password_hash = password_hash
        user_password.updated_at = now
        await self.password_repo.update(user_password)

    async def delete_user(self, user: User) -> None:
        """
        Soft-delete a user.

        In one transaction: the user row and their live password rows get
        the same ``deleted_at``, and their active sessions are deactivated.
        """
        now = self.clock.now()
        async with atomic(self.session):
            async with map_db_error(UserDeleteError):
                await self.user_repo.soft_delete(user, now)
                await self.password_repo.soft_delete_where(UserPassword.user_id == user.user_id, now=now)
                await self.session_repo.deactivate_user_sessions(user.user_id, now)

        logger.info(f"User deleted: {user.user_id}")
