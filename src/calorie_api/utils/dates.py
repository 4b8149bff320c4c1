"""Date and time utility functions."""

import calendar
from datetime import date, datetime, timezone

UTC_TZ = timezone.utc


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC_TZ)


def to_iso_date(dt: datetime) -> str:
    """
    Get the log key (YYYY-MM-DD) for a datetime.

    Args:
        dt: Datetime to convert (assumed UTC if no timezone)

    Returns:
        ISO date string in UTC
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC_TZ)
    return dt.astimezone(UTC_TZ).date().isoformat()


def calendar_month_dates(year: int, month: int) -> list[date]:
    """
    List every date in a month.

    Raises:
        ValueError: If month is not in 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    _, days = calendar.monthrange(year, month)
    return [date(year, month, day) for day in range(1, days + 1)]
