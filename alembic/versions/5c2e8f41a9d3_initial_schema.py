"""Initial schema for Calendarium

Revision ID: 5c2e8f41a9d3
Revises:
Create Date: 2026-10-17

Tables Created:
- user: accounts
- user_password: password hashes, one live row per live user
- role: named roles
- user_role: role assignments
- user_session: opaque-token sessions
- calendar: calendars
- event: calendar entries
- user_calendar: user access to calendars
- calendar_event: event placement in calendars

Every table carries created_at, updated_at and deleted_at (soft delete).
Uniqueness among live rows (user.email, role.name and the link pairs) is
enforced by partial unique indexes on PostgreSQL and SQLite only; MySQL
has no partial indexes and relies on the application checks.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c2e8f41a9d3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE_ROW = "deleted_at IS NULL"

# (index name, table, columns)
LIVE_UNIQUE_INDEXES = [
    ("uq_user_email_live", "user", ["email"]),
    ("uq_role_name_live", "role", ["name"]),
    ("uq_user_role_pair_live", "user_role", ["user_id", "role_id"]),
    ("uq_user_calendar_pair_live", "user_calendar", ["user_id", "calendar_id"]),
    ("uq_calendar_event_pair_live", "calendar_event", ["calendar_id", "event_id"]),
]


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def _create_indexes(table: str, *columns: str) -> None:
    for column in ("created_at", "deleted_at", *columns):
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=False)


def _supports_partial_indexes() -> bool:
    return op.get_bind().dialect.name in ("postgresql", "sqlite")


def upgrade() -> None:
    """
    Upgrade schema.

    Creates the complete database structure from scratch.
    """
    # =========================================================================
    # STEP 1: Base tables (no dependencies)
    # =========================================================================

    op.create_table(
        "user",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lastname", sa.String(length=100), nullable=False),
        sa.Column("firstname", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_user")),
    )
    _create_indexes("user", "email")

    op.create_table(
        "role",
        sa.Column("role_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("role_id", name=op.f("pk_role")),
    )
    _create_indexes("role", "name")

    op.create_table(
        "calendar",
        sa.Column("calendar_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("calendar_id", name=op.f("pk_calendar")),
    )
    _create_indexes("calendar")

    op.create_table(
        "event",
        sa.Column("event_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("canceled", sa.Boolean(), nullable=False),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint("event_id", name=op.f("pk_event")),
    )
    _create_indexes("event", "start")

    # =========================================================================
    # STEP 2: Tables referencing users
    # =========================================================================

    op.create_table(
        "user_password",
        sa.Column("user_password_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("expired_at", sa.DateTime(), nullable=True),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user.user_id"], name=op.f("fk_user_password_user_id_user")
        ),
        sa.PrimaryKeyConstraint("user_password_id", name=op.f("pk_user_password")),
    )
    _create_indexes("user_password", "user_id")

    op.create_table(
        "user_session",
        sa.Column("user_session_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("session_token", sa.String(length=64), nullable=False),
        sa.Column("refresh_token", sa.String(length=64), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("device_info", sa.String(length=255), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user.user_id"], name=op.f("fk_user_session_user_id_user")
        ),
        sa.PrimaryKeyConstraint("user_session_id", name=op.f("pk_user_session")),
    )
    _create_indexes("user_session", "user_id", "session_token", "refresh_token")

    # =========================================================================
    # STEP 3: Link tables
    # =========================================================================

    op.create_table(
        "user_role",
        sa.Column("user_roles_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user.user_id"], name=op.f("fk_user_role_user_id_user")
        ),
        sa.ForeignKeyConstraint(
            ["role_id"], ["role.role_id"], name=op.f("fk_user_role_role_id_role")
        ),
        sa.PrimaryKeyConstraint("user_roles_id", name=op.f("pk_user_role")),
    )
    _create_indexes("user_role", "user_id", "role_id")

    op.create_table(
        "user_calendar",
        sa.Column("user_calendar_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("calendar_id", sa.Integer(), nullable=False),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["user.user_id"], name=op.f("fk_user_calendar_user_id_user")
        ),
        sa.ForeignKeyConstraint(
            ["calendar_id"],
            ["calendar.calendar_id"],
            name=op.f("fk_user_calendar_calendar_id_calendar"),
        ),
        sa.PrimaryKeyConstraint("user_calendar_id", name=op.f("pk_user_calendar")),
    )
    _create_indexes("user_calendar", "user_id", "calendar_id")

    op.create_table(
        "calendar_event",
        sa.Column("calendar_event_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("calendar_id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        *_lifecycle_columns(),
        sa.ForeignKeyConstraint(
            ["calendar_id"],
            ["calendar.calendar_id"],
            name=op.f("fk_calendar_event_calendar_id_calendar"),
        ),
        sa.ForeignKeyConstraint(
            ["event_id"], ["event.event_id"], name=op.f("fk_calendar_event_event_id_event")
        ),
        sa.PrimaryKeyConstraint("calendar_event_id", name=op.f("pk_calendar_event")),
    )
    _create_indexes("calendar_event", "calendar_id", "event_id")

    # =========================================================================
    # STEP 4: Live-row uniqueness
    # =========================================================================

    if _supports_partial_indexes():
        for name, table, columns in LIVE_UNIQUE_INDEXES:
            op.create_index(
                name,
                table,
                columns,
                unique=True,
                postgresql_where=sa.text(LIVE_ROW),
                sqlite_where=sa.text(LIVE_ROW),
            )


def downgrade() -> None:
    """Drop every table, links first."""
    if _supports_partial_indexes():
        for name, table, _ in reversed(LIVE_UNIQUE_INDEXES):
            op.drop_index(name, table_name=table)

    for table in (
        "calendar_event",
        "user_calendar",
        "user_role",
        "user_session",
        "user_password",
        "event",
        "calendar",
        "role",
        "user",
    ):
        op.drop_table(table)
