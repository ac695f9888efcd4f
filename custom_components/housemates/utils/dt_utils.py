# File: utils/dt_utils.py
"""Date and time utilities for Housemates.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - set_default_timezone / get_default_timezone: Local timezone configuration
    - dt_now_utc: Current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - start_of_local_day: Local midnight for a datetime
    - local_midnight: Local midnight for a calendar date
    - dt_local_date: Calendar date of a datetime in the local timezone
    - dt_parse: Normalize ISO strings, dates and datetimes to aware datetimes
    - dt_to_iso: Serialize an aware datetime (or None)
    - dt_add_frequency: Step a date forward by one chore frequency
    - dt_days_between: Whole days from one date to another
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# These mirror const.py values but are defined locally for purity.
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_ONE_TIME = "one-time"


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the household's timezone.

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


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive values are assumed to be UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the start of day (00:00:00) for a datetime in local timezone.

    Args:
        dt_obj: Datetime object (can be in any timezone)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    return local_midnight(dt_local_date(dt_obj, tz), tz)


def local_midnight(day: date, tz: ZoneInfo | None = None) -> datetime:
    """Return 00:00:00 local time on the given calendar date."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.combine(day, datetime.min.time(), tzinfo=tz_info)


def dt_local_date(dt_obj: datetime, tz: ZoneInfo | None = None) -> date:
    """Return the calendar date of a datetime as seen in local timezone.

    Example:
        2025-04-07T23:30:00-04:00 in America/New_York → date(2025, 4, 7)
    """
    return as_local(dt_obj, tz).date()


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize various datetime input formats to an aware datetime.

    Args:
        dt_input: ISO string, date or datetime to normalize, or None
        default_tzinfo: Timezone to use if the input is naive
                        (defaults to DEFAULT_TIME_ZONE if None)

    Returns:
        Timezone-aware datetime, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-04-15")
        datetime.datetime(2025, 4, 15, 0, 0, tzinfo=ZoneInfo('UTC'))
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime

    if isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())
    elif isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            _LOGGER.debug("dt_parse: could not parse %r", dt_input)
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)
    return result


def dt_to_iso(dt_obj: datetime | None) -> str | None:
    """Serialize a datetime as an ISO 8601 string, passing None through."""
    if dt_obj is None:
        return None
    return dt_obj.isoformat()


# ==============================================================================
# Scheduling Arithmetic
# ==============================================================================


def dt_add_frequency(base: date, frequency: str) -> date | None:
    """Step a calendar date forward by one chore frequency.

    Monthly steps use relativedelta, which clamps to the last day of a
    shorter target month (Jan 31 → Feb 28/29).

    Args:
        base: Starting date
        frequency: One of the FREQUENCY_* constants

    Returns:
        The next date, or None for one-time (and unknown) frequencies.

    Examples:
        dt_add_frequency(date(2025, 1, 31), "daily") → date(2025, 2, 1)
        dt_add_frequency(date(2025, 1, 31), "weekly") → date(2025, 2, 7)
        dt_add_frequency(date(2025, 1, 31), "monthly") → date(2025, 2, 28)
        dt_add_frequency(date(2025, 1, 31), "one-time") → None
    """
    if frequency == FREQUENCY_DAILY:
        return base + timedelta(days=1)
    if frequency == FREQUENCY_WEEKLY:
        return base + timedelta(days=7)
    if frequency == FREQUENCY_MONTHLY:
        return base + relativedelta(months=1)
    if frequency != FREQUENCY_ONE_TIME:
        _LOGGER.warning("dt_add_frequency: unknown frequency %s", frequency)
    return None


def dt_days_between(earlier: date, later: date) -> int:
    """Return the number of whole days from earlier to later (may be negative)."""
    return (later - earlier).days
