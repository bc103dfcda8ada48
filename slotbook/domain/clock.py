"""
Clock-time and calendar-date helpers.

Clock times are handled as integer minute offsets from midnight so that
slot layout and overlap checks stay plain integer arithmetic.
"""

from datetime import date as std_date

import pendulum
from pendulum import Date

from .exceptions import InvalidDateError, InvalidTimeFormatError

MINUTES_PER_DAY = 24 * 60
DATE_FORMAT = "YYYY-MM-DD"


def _is_clock_part(part: str) -> bool:
    return 1 <= len(part) <= 2 and part.isascii() and part.isdigit()


def to_minutes(clock_time: str) -> int:
    """
    Convert an ``HH:MM`` clock time to minutes after midnight.

    Raises:
        InvalidTimeFormatError: If the value is not two colon-separated
            one- or two-digit ASCII integers with hour in 0-23 and minute
            in 0-59.
    """
    if not isinstance(clock_time, str):
        raise InvalidTimeFormatError(f"Clock time must be a string, got {clock_time!r}")

    parts = clock_time.strip().split(":")
    if len(parts) != 2 or not all(_is_clock_part(part) for part in parts):
        raise InvalidTimeFormatError(f"Invalid clock time {clock_time!r}, expected HH:MM")

    hour, minute = (int(part) for part in parts)
    if not 0 <= hour <= 23:
        raise InvalidTimeFormatError(f"Hour must be between 0 and 23, got {hour}")
    if not 0 <= minute <= 59:
        raise InvalidTimeFormatError(f"Minute must be between 0 and 59, got {minute}")

    return hour * 60 + minute


def from_minutes(minutes: int) -> str:
    """Convert minutes after midnight back to a zero-padded ``HH:MM`` string."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minute offset must be within a single day, got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(clock_time: str) -> str:
    """Return the canonical zero-padded form of a clock time."""
    return from_minutes(to_minutes(clock_time))


def parse_date(value) -> Date:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    ``date`` objects are accepted as-is.

    Raises:
        InvalidDateError: If the value cannot be parsed.
    """
    if isinstance(value, std_date):
        return pendulum.date(value.year, value.month, value.day)

    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Invalid date {value!r}, expected YYYY-MM-DD", field="date")

    text = value.strip()
    try:
        parsed = pendulum.from_format(text, DATE_FORMAT)
    except (ValueError, TypeError) as exc:
        raise InvalidDateError(
            f"Invalid date {value!r}, expected YYYY-MM-DD", field="date"
        ) from exc

    # from_format also takes short years and unpadded month or day
    if parsed.format(DATE_FORMAT) != text:
        raise InvalidDateError(f"Invalid date {value!r}, expected YYYY-MM-DD", field="date")

    return parsed.date()


def normalize_date(value) -> str:
    """Return the ISO string form of a calendar date."""
    return parse_date(value).isoformat()


def weekday_number(day: std_date) -> int:
    """Return the weekday with 0=Sunday through 6=Saturday."""
    return day.isoweekday() % 7
