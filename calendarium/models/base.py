"""
Declarative base and shared column types for all models.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, MetaData, text
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

# Deterministic constraint names keep schema diffs stable across dialects
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base class for all Calendarium models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UTCDateTime(TypeDecorator[datetime]):
    """
    Timestamp column that always round-trips as an aware UTC datetime.

    Values are stored as naive UTC (MySQL DATETIME and SQLite have no zone
    information) and the UTC zone is reattached on load. Naive values
    passed in are taken to be UTC already.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


def live_unique_index(name: str, *columns: str) -> Index:
    """
    Unique index restricted to live rows (``deleted_at IS NULL``).

    Only emitted on dialects with partial indexes; on MySQL the service
    layer's check-then-insert is the only guard.
    """
    live = text("deleted_at IS NULL")
    return Index(
        name,
        *columns,
        unique=True,
        postgresql_where=live,
        sqlite_where=live,
    ).ddl_if(dialect=("postgresql", "sqlite"))
