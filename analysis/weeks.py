"""Calendar-week helpers for trend views.

Weeks start on Monday (ISO 8601). This module provides pure helpers (no Django
imports) to compute trailing week windows deterministically.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta


TREND_WEEKS = 4
_CALENDAR_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


@dataclass(frozen=True, slots=True)
class WeekWindow:
    """An inclusive Monday-Sunday date window.

    Attributes:
        start: Monday of the week (inclusive).
        end: Sunday of the week (inclusive).
        offset: Weeks before the current week (0 = current week).
    """

    start: date
    end: date
    offset: int

    def contains(self, day: date) -> bool:
        """Return True when `day` falls within the window."""

        return self.start <= day <= self.end


def week_start_for(day: date) -> date:
    """Return the Monday of the ISO week containing `day`."""

    iso_year, iso_week, _weekday = day.isocalendar()
    return date.fromisocalendar(iso_year, iso_week, 1)


def trailing_weeks(today: date, *, count: int = TREND_WEEKS) -> tuple[WeekWindow, ...]:
    """Return the current week and the `count - 1` weeks before it.

    Args:
        today: Reference date that anchors the current week.
        count: Number of windows to return (>= 1).

    Returns:
        Week windows ordered oldest to newest.
    """

    if count < 1:
        raise ValueError("count must be >= 1")

    current_start = week_start_for(today)
    windows: list[WeekWindow] = []
    for offset in range(count - 1, -1, -1):
        start = current_start - timedelta(weeks=offset)
        windows.append(WeekWindow(start=start, end=start + timedelta(days=6), offset=offset))
    return tuple(windows)


def parse_calendar_date(value: object) -> date | None:
    """Parse a `YYYY-MM-DD` string into a date, returning None when invalid.

    Month and day may omit their zero padding (`2024-1-22`). Dates and
    datetimes are returned as plain dates.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = _CALENDAR_DATE_RE.match(value.strip())
    if match is None:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None
