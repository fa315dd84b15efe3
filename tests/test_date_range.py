"""
Tests for leaderboard date window validation.
"""

import pytest

from playhub_bot.utils.date_range import (
    parse_date_window,
    validate_date_range,
    window_bounds,
)
from playhub_bot.utils.exceptions import InvalidDateRangeError


def test_valid_window():
    assert validate_date_range('2025-01-01', '2025-03-31') is None


def test_single_day_window():
    assert validate_date_range('2025-01-01', '2025-01-01') is None


@pytest.mark.parametrize('start, end', [
    ('2025-1-01', '2025-02-01'),
    ('2025-02-30', '2025-03-01'),
    ('not-a-date', '2025-03-01'),
    ('2025-01-01', ''),
])
def test_invalid_format(start, end):
    assert validate_date_range(start, end) == "Dates must be valid YYYY-MM-DD."


def test_inverted_range():
    assert validate_date_range('2025-03-02', '2025-03-01') == "start_date must be on or before end_date."


def test_range_over_limit():
    assert validate_date_range('2024-01-01', '2025-01-05') == \
        "Date range cannot exceed 366 days (about 1 year)."


def test_full_leap_year_fits():
    assert validate_date_range('2024-01-01', '2024-12-31') is None


def test_custom_limit_raises_typed_error():
    with pytest.raises(InvalidDateRangeError) as exc:
        parse_date_window('2025-01-01', '2025-01-20', max_days=7)
    assert "7 days" in exc.value.user_message


def test_window_bounds_are_utc_day_edges():
    assert window_bounds('2025-01-01', '2025-01-31') == (
        '2025-01-01T00:00:00Z',
        '2025-01-31T23:59:59Z',
    )
