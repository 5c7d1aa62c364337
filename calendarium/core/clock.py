"""
Clock capability.

Every timestamp the application writes (created_at, updated_at, deleted_at,
expires_at) comes from a Clock. Services take a single ``now()`` per
operation so that all rows touched by one operation share one instant.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """
    Clock frozen at a given instant, for tests.

    ``advance`` moves it forward so expiry paths can be exercised without
    sleeping.
    """

    def __init__(self, instant: datetime):
        self.instant = instant.astimezone(UTC)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **delta: float) -> None:
        self.instant = self.instant + timedelta(**delta)


system_clock = SystemClock()


def get_clock() -> Clock:
    """
    FastAPI dependency returning the application clock.

    Tests replace it through ``app.dependency_overrides[get_clock]``.
    """
    return system_clock
