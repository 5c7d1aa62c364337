"""
Role and UserRole models.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from calendarium.models.base import Base, live_unique_index
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin

# Roles every deployment starts with
ADMIN_ROLE = "admin"
USER_ROLE = "user"
DEFAULT_ROLES = {
    ADMIN_ROLE: "Administrator with full access",
    USER_ROLE: "Standard user",
}


class Role(Base, TimestampMixin, SoftDeleteMixin):
    """
    Named role. ``name`` is unique among live roles.

    The ``admin`` role opens every admin-gated endpoint; other names are
    checked by the generic role gates.
    """

    __tablename__ = "role"
    __table_args__ = (live_unique_index("uq_role_name_live", "name"),)

    role_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Role(role_id={self.role_id}, name={self.name})>"


class UserRole(Base, TimestampMixin, SoftDeleteMixin):
    """
    Assignment of a role to a user.

    A user holds a role iff a live row exists for the pair.
    """

    __tablename__ = "user_role"
    __table_args__ = (live_unique_index("uq_user_role_pair_live", "user_id", "role_id"),)

    user_roles_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.user_id"), nullable=False, index=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("role.role_id"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
