"""
Date range computation for event listings.

Every listing (by day, ISO week, or month, from path segments or from the
``filter_type``/``date`` query) resolves to a half-open UTC interval
``[start, end)`` here. Validation runs in a fixed order: year, month,
week, day; the first failing field decides the error kind.
"""

import re
from datetime import UTC, date, datetime, timedelta

from calendarium.exceptions import (
    InvalidDataError,
    InvalidDayError,
    InvalidFilterTypeError,
    InvalidMonthError,
    InvalidWeekNumberError,
    InvalidYearError,
)

DateRange = tuple[datetime, datetime]

FILTER_TYPES = ("day", "week", "month")

_DAY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_WEEK_PATTERN = re.compile(r"^(\d{4})-W(\d{2})$")
_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def _to_int(raw: str | int, error: type[Exception]) -> int:
    if isinstance(raw, int):
        return raw
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise error() from None


def parse_year(raw: str | int) -> int:
    year = _to_int(raw, InvalidYearError)
    if year < 1 or year > 9999:
        raise InvalidYearError()
    return year


def parse_month(raw: str | int) -> int:
    month = _to_int(raw, InvalidMonthError)
    if not 1 <= month <= 12:
        raise InvalidMonthError()
    return month


def parse_week(raw: str | int) -> int:
    week = _to_int(raw, InvalidWeekNumberError)
    if not 1 <= week <= 53:
        raise InvalidWeekNumberError()
    return week


def parse_day(raw: str | int) -> int:
    day = _to_int(raw, InvalidDayError)
    if not 1 <= day <= 31:
        raise InvalidDayError()
    return day


def _midnight(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=UTC)


def month_range(year: str | int, month: str | int) -> DateRange:
    """
    ``[y-m-01T00:00Z, first day of the next month)``.

    Raises InvalidYear for December 9999, whose end is not representable.

    Example:
        >>> month_range(2024, 12)
        (datetime(2024, 12, 1, tzinfo=UTC), datetime(2025, 1, 1, tzinfo=UTC))
    """
    y = parse_year(year)
    m = parse_month(month)
    start = datetime(y, m, 1, tzinfo=UTC)
    if m < 12:
        return start, datetime(y, m + 1, 1, tzinfo=UTC)
    try:
        return start, datetime(y + 1, 1, 1, tzinfo=UTC)
    except ValueError:
        # December 9999 ends past datetime.max
        raise InvalidYearError() from None


def day_range(year: str | int, month: str | int, day: str | int) -> DateRange:
    """
    ``[y-m-dT00:00Z, +1 day)``.

    Days in 1..31 that do not exist in the month (2023-02-30) are rejected
    as InvalidDay.
    """
    y = parse_year(year)
    m = parse_month(month)
    d = parse_day(day)
    try:
        start = datetime(y, m, d, tzinfo=UTC)
    except ValueError:
        raise InvalidDayError() from None
    try:
        return start, start + timedelta(days=1)
    except OverflowError:
        raise InvalidYearError() from None


def iso_week1_monday(year: int) -> date:
    """
    Monday of ISO-8601 week 1, the week containing January 4.

    Example:
        >>> iso_week1_monday(2020)  # Jan 4 2020 is a Saturday
        datetime.date(2019, 12, 30)
    """
    jan4 = date(year, 1, 4)
    return jan4 - timedelta(days=jan4.isoweekday() - 1)


def week_range(year: str | int, week: str | int) -> DateRange:
    """
    Seven days starting on the Monday of ISO week ``week``.

    Week 53 is accepted for every year; in years with 52 ISO weeks it
    covers the first week of the following ISO year.
    """
    y = parse_year(year)
    w = parse_week(week)
    try:
        start = _midnight(iso_week1_monday(y) + timedelta(weeks=w - 1))
        return start, start + timedelta(days=7)
    except OverflowError:
        raise InvalidYearError() from None


def filter_range(filter_type: str, value: str | None, now: datetime) -> DateRange:
    """
    Resolve a ``filter_type``/``date`` query pair.

    Formats: ``2024-01-15`` (day), ``2024-W01`` (week), ``2024-01`` (month).
    A missing ``value`` means the period containing ``now``.

    Raises:
        InvalidFilterTypeError: filter_type outside day, week, month
        InvalidDataError: value does not match the filter's format
    """
    if filter_type not in FILTER_TYPES:
        raise InvalidFilterTypeError()

    if value is None:
        today = now.astimezone(UTC).date()
        if filter_type == "day":
            return day_range(today.year, today.month, today.day)
        if filter_type == "week":
            iso_year, iso_week, _ = today.isocalendar()
            return week_range(iso_year, iso_week)
        return month_range(today.year, today.month)

    if filter_type == "day":
        match = _DAY_PATTERN.match(value)
        if not match:
            raise InvalidDataError()
        return day_range(*match.groups())
    if filter_type == "week":
        match = _WEEK_PATTERN.match(value)
        if not match:
            raise InvalidDataError()
        return week_range(*match.groups())
    match = _MONTH_PATTERN.match(value)
    if not match:
        raise InvalidDataError()
    return month_range(*match.groups())
