"""
Calendar-day utilities used by availability and pricing.

Notes:
- Stays are half-open: ``[check_in, check_out)``. The check-out day is
  neither occupied nor charged.
- Pricing windows are inclusive on both ends: ``[start_date, end_date]``.
- "Today" is always a calendar date in the hotel's configured timezone,
  never the date part of a UTC instant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional

import pytz

logger = logging.getLogger(__name__)

UTC = timezone.utc


class DateUtilsError(ValueError):
    """Custom exception for date utilities errors."""
    pass


@dataclass(frozen=True)
class DateRange:
    """Half-open range of calendar days ``[start, end)``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if isinstance(self.start, datetime) or isinstance(self.end, datetime):
            raise DateUtilsError("DateRange works on calendar dates, not datetimes")
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise DateUtilsError("Both start and end must be date objects")

    @property
    def nights(self) -> int:
        """Number of nights (days) covered; zero or negative when empty."""
        return (self.end - self.start).days

    @property
    def is_empty(self) -> bool:
        return self.nights <= 0

    def overlaps(self, other: "DateRange") -> bool:
        """Two half-open ranges overlap iff each starts before the other ends."""
        return self.start < other.end and other.start < self.end

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def days(self) -> Iterator[date]:
        """Yield every calendar day in the range (check-out day excluded)."""
        for offset in range(max(self.nights, 0)):
            yield self.start + timedelta(days=offset)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


@dataclass(frozen=True)
class DateWindow:
    """Inclusive range of calendar days ``[start, end]``."""

    start: date
    end: date

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    def intersects(self, other: "DateWindow") -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        return daterange(self.start, self.end)


def daterange(start: date, end: date) -> Iterator[date]:
    """
    Yield all dates from start to end inclusive.
    If start > end, yields nothing.
    """
    if not isinstance(start, date) or not isinstance(end, date):
        raise DateUtilsError("Both start and end must be date objects")

    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def is_weekend(d: date) -> bool:
    """Return True for Saturday and Sunday."""
    return d.weekday() >= 5


def get_timezone(tz_name: str):
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError as e:
        logger.error(f"Unknown timezone '{tz_name}'")
        raise DateUtilsError(f"Unknown timezone: {tz_name}") from e


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If naive, assumes it's already in UTC and only attaches tzinfo.
    - If aware, converts to UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of an instant as seen in the given timezone."""
    return to_utc(dt).astimezone(get_timezone(tz_name)).date()


def start_of_local_day(d: date, tz_name: str) -> datetime:
    """Aware UTC instant at which the calendar day ``d`` begins in ``tz_name``."""
    tz = get_timezone(tz_name)
    return tz.localize(datetime.combine(d, time.min)).astimezone(UTC)


def parse_date(value: str, fmt: str = "%Y-%m-%d") -> date:
    """Parse a date string with the given format (default 'YYYY-MM-DD')."""
    if not isinstance(value, str) or not value.strip():
        raise DateUtilsError("Date string cannot be empty")

    try:
        return datetime.strptime(value.strip(), fmt).date()
    except ValueError as e:
        raise DateUtilsError(f"Invalid date format. Expected format: {fmt}") from e


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, returning None for impossible combinations (e.g. 02-29)."""
    try:
        return date(year, month, day)
    except ValueError:
        return None
