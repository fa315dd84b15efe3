"""
Date window parsing and validation for leaderboard queries.

Dates are calendar dates (YYYY-MM-DD) interpreted on UTC day boundaries:
the window runs from start 00:00:00Z through end 23:59:59Z inclusive.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

from playhub_bot.constants import LeaderboardConstants
from playhub_bot.utils.exceptions import InvalidDateRangeError

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_SECONDS_PER_DAY = 24 * 60 * 60


def parse_iso_date(text: str) -> date:
    """
    Parse a strict YYYY-MM-DD date.

    Raises:
        ValueError: If the format or the calendar date is invalid
    """
    if not isinstance(text, str) or not _DATE_RE.match(text.strip()):
        raise ValueError(f"Invalid date format: {text!r}")
    return date.fromisoformat(text.strip())


def parse_date_window(
    start_date: str,
    end_date: str,
    max_days: int = LeaderboardConstants.MAX_DATE_RANGE_DAYS,
) -> Tuple[date, date]:
    """
    Parse and check an inclusive date window.

    Raises:
        InvalidDateRangeError: bad format, inverted range, or span over ``max_days``
    """
    try:
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
    except ValueError:
        raise InvalidDateRangeError("Dates must be valid YYYY-MM-DD.")

    start_at = datetime.combine(start, time(0, 0, 0), tzinfo=timezone.utc)
    end_at = datetime.combine(end, time(23, 59, 59), tzinfo=timezone.utc)
    if start_at > end_at:
        raise InvalidDateRangeError("start_date must be on or before end_date.")

    days = round((end_at - start_at).total_seconds() / _SECONDS_PER_DAY)
    if days > max_days:
        raise InvalidDateRangeError(f"Date range cannot exceed {max_days} days (about 1 year).")
    return start, end


def validate_date_range(
    start_date: str,
    end_date: str,
    max_days: int = LeaderboardConstants.MAX_DATE_RANGE_DAYS,
) -> Optional[str]:
    """Return a user-facing error message, or None when the window is valid."""
    try:
        parse_date_window(start_date, end_date, max_days)
    except InvalidDateRangeError as e:
        return e.user_message
    return None


def window_bounds(start_date: str, end_date: str) -> Tuple[str, str]:
    """Upstream ``start_date_after`` / ``start_date_before`` values for a window."""
    return f"{start_date}T00:00:00Z", f"{end_date}T23:59:59Z"
