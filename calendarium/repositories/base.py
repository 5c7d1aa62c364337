"""
Base repository with generic CRUD operations.

This module provides a generic repository pattern for database operations.
All specific repositories should inherit from BaseRepository.

Every read filters out soft-deleted rows; there is no way to read a
deleted row through a repository.

Type Parameters:
    ModelType: The SQLAlchemy model class (e.g., User, Calendar, etc.)
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from calendarium.models.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for database operations.

    Provides common operations that work with any model carrying the
    soft-delete mixin. Primary keys are integer auto-increment columns whose
    name differs per table (``user_id``, ``calendar_id``...), so the key
    column is looked up from the mapper.

    Usage:
        class CalendarRepository(BaseRepository[Calendar]):
            def __init__(self, session: AsyncSession):
                super().__init__(Calendar, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session
        self.pk = inspect(model).primary_key[0]

    def _apply_soft_delete_filter(self, query: Select[Any]) -> Select[Any]:
        """
        Restrict a query to live rows.

        Args:
            query: SQLAlchemy select statement

        Returns:
            Query with ``deleted_at IS NULL`` applied
        """
        return query.where(self.model.deleted_at.is_(None))

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist a model instance.

        Returns:
            Persisted model instance (with primary key populated)
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Get a live record by primary key.

        Example:
            calendar = await calendar_repo.get_by_id(calendar_id)
            if calendar is None:
                raise CalendarNotFoundError()
        """
        query = select(self.model).where(self.pk == id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def update(self, instance: ModelType) -> ModelType:
        """
        Persist changes to an already-modified model instance.

        The caller modifies attributes (including ``updated_at``) before
        calling this method; it only handles flush + refresh.

        Example:
            calendar.title = "Team"
            calendar.updated_at = now
            calendar = await calendar_repo.update(calendar)
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def soft_delete(self, instance: ModelType, now: datetime) -> ModelType:
        """
        Soft delete a record (set deleted_at).

        Args:
            instance: Model instance to soft delete
            now: Timestamp shared by every row of the calling operation
        """
        instance.deleted_at = now
        await self.session.flush()
        return instance

    async def soft_delete_where(self, *criteria: ColumnElement[bool], now: datetime) -> int:
        """
        Soft delete every live row matching ``criteria`` in one UPDATE.

        Used for fan-out (links of a deleted calendar, assignments of a
        deleted role...).

        Returns:
            Number of rows soft-deleted
        """
        result = await self.session.execute(
            update(self.model)
            .where(self.model.deleted_at.is_(None), *criteria)
            .values(deleted_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return result.rowcount

    async def exists(self, id: int) -> bool:
        """
        Check if a live record exists by primary key.

        Example:
            if not await role_repo.exists(role_id):
                raise RoleNotFoundError()
        """
        record = await self.get_by_id(id)
        return record is not None
