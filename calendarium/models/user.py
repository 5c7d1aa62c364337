"""
User and UserPassword models.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from calendarium.models.base import Base, UTCDateTime, live_unique_index
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin


# =============================================================================
# User Model
# =============================================================================


class User(Base, TimestampMixin, SoftDeleteMixin):
    """
    User account.

    Attributes:
        user_id: Auto-increment primary key
        lastname: Family name
        firstname: Given name
        email: Login identifier, unique among live users
        created_at / updated_at / deleted_at: lifecycle timestamps

    Credentials live in UserPassword so that password rotation never touches
    the user row. Roles are attached through UserRole.
    """

    __tablename__ = "user"
    __table_args__ = (live_unique_index("uq_user_email_live", "email"),)

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lastname: Mapped[str] = mapped_column(String(100), nullable=False)
    firstname: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"


# =============================================================================
# UserPassword Model
# =============================================================================


class UserPassword(Base, TimestampMixin, SoftDeleteMixin):
    """
    Password hash of a user. Exactly one live row per live user.
    """

    __tablename__ = "user_password"

    user_password_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("user.user_id"),
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    expired_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def __repr__(self) -> str:
        return f"<UserPassword(user_password_id={self.user_password_id}, user_id={self.user_id})>"
