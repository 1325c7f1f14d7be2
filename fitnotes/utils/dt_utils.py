# File: utils/dt_utils.py
"""Date and time utilities for FitNotes scheduling.

Pure Python calendar-day helpers. The scheduling engines work on calendar
days (`datetime.date`) with local-midnight boundaries; everything that turns a
datetime into a day goes through `dt_as_local_date` so the day-boundary
policy lives in one place.

Functions:
    - set_default_timezone / get_default_timezone: Local zone configuration
    - dt_today_local: Today's date in the local zone (the clock boundary)
    - dt_now_utc / dt_now_iso: Timestamps for record bookkeeping
    - dt_parse_date: Parse date strings
    - dt_as_local_date: Normalize date/datetime/string input to a local day
    - weekday_index: Sunday-based weekday index (0 = Sunday .. 6 = Saturday)
    - dt_days_between: Whole-day difference between two days
    - dt_add_days: Day arithmetic
    - dt_iter_days: Iterate a bounded run of consecutive days
    - dt_format_day_label: "Wednesday, Jan 7" style labels
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Python's date.weekday() is Monday-based; shift so Sunday is 0
_WEEKDAY_SHIFT = 1
_DAYS_PER_WEEK = 7


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once during application setup with the user's zone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    This is the only function in the package that reads the clock for a
    calendar day. Callers obtain "today" here and pass it into the engines
    and managers explicitly.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Today's date in the specified timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string."""
    return dt_now_utc().isoformat()


# ==============================================================================
# Date Parsing and Normalization
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2025-04-07" (ISO format)
    - "2025-04-07T18:30:00" (ISO datetime, time dropped)
    - "04/07/2025" (US format)
    - "07/04/2025" (European format - attempted if US fails)

    Args:
        date_str: Date string to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    cleaned = date_str.strip()

    # Try ISO format first (most common)
    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        pass

    try:
        return dt_as_local_date(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("Could not parse date string: %s", date_str)
    return None


def dt_as_local_date(value: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Return the local calendar day a date or datetime falls on.

    - `date` values are returned unchanged.
    - Naive datetimes are local wall-clock times; the time part is dropped.
    - Aware datetimes are converted to the local zone first, so 23:30 UTC can
      be the next day in Europe/Berlin.

    Args:
        value: Date or datetime to normalize
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        The calendar day (local midnight boundary).

    Raises:
        TypeError: If value is not a date or datetime.
    """
    # datetime is a subclass of date, so test it first
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz or DEFAULT_TIME_ZONE).date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


# ==============================================================================
# Day Arithmetic
# ==============================================================================


def weekday_index(day: date) -> int:
    """Return the Sunday-based weekday index (0 = Sunday .. 6 = Saturday).

    Example:
        weekday_index(date(2026, 1, 4)) → 0  # Sunday
        weekday_index(date(2026, 1, 7)) → 3  # Wednesday
    """
    return (day.weekday() + _WEEKDAY_SHIFT) % _DAYS_PER_WEEK


def dt_days_between(start: date, end: date) -> int:
    """Return the whole number of days from start to end (negative if end < start)."""
    return (end - start).days


def dt_add_days(day: date, delta: int) -> date:
    """Return day shifted by delta days (delta may be negative)."""
    return day + timedelta(days=delta)


def dt_iter_days(start: date, count: int) -> Iterator[date]:
    """Yield count consecutive days beginning with start.

    Yields nothing when count <= 0.
    """
    for offset in range(count):
        yield start + timedelta(days=offset)


# ==============================================================================
# Formatting
# ==============================================================================


def dt_format_day_label(day: date) -> str:
    """Format a day as "Wednesday, Jan 7" (full weekday, short month, no padding)."""
    return f"{day:%A}, {day:%b} {day.day}"
