"""
Event and CalendarEvent models.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from calendarium.models.base import Base, UTCDateTime, live_unique_index
from calendarium.models.mixins import SoftDeleteMixin, TimestampMixin


class Event(Base, TimestampMixin, SoftDeleteMixin):
    """
    A calendar entry.

    Attributes:
        event_id: Auto-increment primary key
        title: Non-empty title
        description: Optional free text
        start: UTC instant the event begins
        duration: Length in minutes, at least 1
        canceled: Kept visible but flagged as not happening
    """

    __tablename__ = "event"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    canceled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Event(event_id={self.event_id}, title={self.title}, start={self.start})>"


class CalendarEvent(Base, TimestampMixin, SoftDeleteMixin):
    """
    Link placing an event in a calendar. At most one live link per pair;
    in practice each event has exactly one.
    """

    __tablename__ = "calendar_event"
    __table_args__ = (
        live_unique_index("uq_calendar_event_pair_live", "calendar_id", "event_id"),
    )

    calendar_event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    calendar_id: Mapped[int] = mapped_column(
        ForeignKey("calendar.calendar_id"),
        nullable=False,
        index=True,
    )
    event_id: Mapped[int] = mapped_column(ForeignKey("event.event_id"), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<CalendarEvent(calendar_id={self.calendar_id}, event_id={self.event_id})>"
