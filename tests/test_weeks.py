"""Tests for Monday-aligned week windows."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from analysis.weeks import parse_calendar_date, trailing_weeks, week_start_for

pytestmark = pytest.mark.unit


def test_week_start_for_is_monday_across_a_year_boundary() -> None:
    """ISO weeks can start in the previous calendar year."""

    assert week_start_for(date(2025, 1, 1)) == date(2024, 12, 30)
    assert week_start_for(date(2024, 12, 29)) == date(2024, 12, 23)
    assert week_start_for(date(2024, 12, 30)) == date(2024, 12, 30)


def test_trailing_weeks_are_contiguous_and_oldest_first() -> None:
    """Four windows end with the current week and leave no gaps."""

    windows = trailing_weeks(date(2025, 1, 1))

    assert [window.offset for window in windows] == [3, 2, 1, 0]
    assert windows[-1].start == date(2024, 12, 30)
    assert windows[-1].end == date(2025, 1, 5)
    for earlier, later in zip(windows, windows[1:]):
        assert (later.start - earlier.end).days == 1


def test_trailing_weeks_rejects_non_positive_count() -> None:
    """At least one window is required."""

    with pytest.raises(ValueError):
        trailing_weeks(date(2025, 1, 1), count=0)


def test_parse_calendar_date_returns_none_for_invalid_values() -> None:
    """Only YYYY-MM-DD strings (or dates) parse."""

    assert parse_calendar_date("2024-02-29") == date(2024, 2, 29)
    assert parse_calendar_date("2023-02-29") is None
    assert parse_calendar_date("yesterday") is None
    assert parse_calendar_date(None) is None


def test_parse_calendar_date_normalizes_datetimes_and_unpadded_strings() -> None:
    """Datetimes become plain dates so window comparisons never mix types."""

    parsed = parse_calendar_date(datetime(2024, 1, 22, 18, 30))

    assert parsed == date(2024, 1, 22)
    assert type(parsed) is date
    assert trailing_weeks(date(2024, 1, 24))[-1].contains(parsed)
    assert parse_calendar_date("2024-1-9") == date(2024, 1, 9)
    assert parse_calendar_date("2024-1-9T00:00") is None
