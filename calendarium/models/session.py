"""
UserSession model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from calendarium.models.base import Base, UTCDateTime
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin


class UserSession(Base, TimestampMixin, SoftDeleteMixin):
    """
    Authenticated session opened by a login.

    Attributes:
        user_session_id: Auto-increment primary key
        user_id: Owner of the session
        session_token: Opaque bearer token (64 hex chars), rotated by refresh
        refresh_token: Opaque token used to obtain a new session_token
        expires_at: End of validity of the current session_token
        device_info: User-Agent captured at login
        ip_address: Client address captured at login
        location: Best-effort location resolved from ip_address
        is_active: Cleared by logout

    Lifecycle:
        ACTIVE on login, ACTIVE again (new token, new expiry) on refresh,
        EXPIRED once expires_at has passed, REVOKED on logout (is_active
        false) or on deletion (deleted_at set). Only ACTIVE sessions
        authenticate requests.
    """

    __tablename__ = "user_session"

    user_session_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.user_id"), nullable=False, index=True)
    session_token: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    device_info: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return (
            f"<UserSession(user_session_id={self.user_session_id}, "
            f"user_id={self.user_id}, is_active={self.is_active})>"
        )
