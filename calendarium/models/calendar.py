"""
Calendar and UserCalendar models.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from calendarium.models.base import Base, live_unique_index
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin


# =============================================================================
# Calendar Model
# =============================================================================


class Calendar(Base, TimestampMixin, SoftDeleteMixin):
    """
    A calendar. Ownership is not modeled: whoever holds a live
    UserCalendar link to it can use it.

    Soft-deleting a calendar also soft-deletes its UserCalendar and
    CalendarEvent links, in the same transaction and with the same
    timestamp.
    """

    __tablename__ = "calendar"

    calendar_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Calendar(calendar_id={self.calendar_id}, title={self.title})>"


# =============================================================================
# UserCalendar Model
# =============================================================================


class UserCalendar(Base, TimestampMixin, SoftDeleteMixin):
    """
    Access link between a user and a calendar. At most one live link per pair.
    """

    __tablename__ = "user_calendar"
    __table_args__ = (
        live_unique_index("uq_user_calendar_pair_live", "user_id", "calendar_id"),
    )

    user_calendar_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.user_id"), nullable=False, index=True)
    calendar_id: Mapped[int] = mapped_column(
        ForeignKey("calendar.calendar_id"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserCalendar(user_id={self.user_id}, calendar_id={self.calendar_id})>"
