"""DTO types consumed and returned by the Analysis Engine.

DTOs are plain data containers used to transport runs into the engine and
statistics out to the UI. They intentionally avoid any Django/ORM dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class TimedRun:
    """A single timed attempt on a track.

    Attributes:
        run_id: Opaque identifier for the underlying persisted record.
        date: Calendar date as entered by the athlete (`YYYY-MM-DD`).
        track_id: Identifier of the track this run belongs to.
        seconds: Elapsed time in seconds.
        timestamp: Creation instant; used for ordering only. It may disagree
            with `date` when an entry is backdated.
    """

    run_id: object
    date: str
    track_id: object
    seconds: float
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class TrackInput:
    """Track descriptor used for filtering and speed conversion.

    Attributes:
        track_id: Identifier matched against `TimedRun.track_id`.
        name: Display name.
        distance_meters: Course length in meters (0 disables speed display).
    """

    track_id: object
    name: str
    distance_meters: float


@dataclass(frozen=True, slots=True)
class DayStats:
    """Statistics for all runs on one track sharing a `date` value.

    Attributes:
        date: The shared `YYYY-MM-DD` string, unchanged from the inputs.
        avg_seconds: Arithmetic mean of the day's times.
        best_seconds: Fastest (minimum) time of the day.
        avg_speed_kmh: Speed implied by the track distance and `avg_seconds`.
        std_dev: Population standard deviation of the day's times.
        count: Number of runs in the group.
        stability_score: 0-100 consistency score; 0 when `count < 3`.
    """

    date: str
    avg_seconds: float
    best_seconds: float
    avg_speed_kmh: float
    std_dev: float
    count: int
    stability_score: float


@dataclass(frozen=True, slots=True)
class WeeklyTrend:
    """Average/best times for one Monday-aligned calendar week.

    Weeks with no runs are zero-filled. An all-zero entry means "no data" and
    never a literal time of zero seconds; use `has_data` to tell them apart.

    Attributes:
        week_label: "This week" for the current week, else the start as `MM/DD`.
        week_start_date: Monday of the week (`YYYY-MM-DD`).
        avg_seconds: Mean time across the week's runs, or 0.
        best_seconds: Fastest time across the week's runs, or 0.
        record_count: Number of runs in the week.
    """

    week_label: str
    week_start_date: str
    avg_seconds: float
    best_seconds: float
    record_count: int

    @property
    def has_data(self) -> bool:
        """Return True when at least one run fell within the week."""

        return self.record_count > 0


@dataclass(frozen=True)
class TrackStatistics:
    """Container for the per-day and per-week views of one track.

    Attributes:
        daily_stats: One entry per distinct date, most recent first.
        weekly_trend: Exactly four weekly entries, oldest first.
    """

    daily_stats: tuple[DayStats, ...] = ()
    weekly_trend: tuple[WeeklyTrend, ...] = ()


class StabilityTier(StrEnum):
    """Severity tier attached to a stability label.

    Values are stable identifiers that templates map to colors.
    """

    neutral = "neutral"
    best = "best"
    very_good = "very_good"
    good = "good"
    caution = "caution"
    worst = "worst"


@dataclass(frozen=True, slots=True)
class StabilityLabel:
    """Human-readable classification of a stability score.

    Attributes:
        label: Short headline (e.g. "Highly stable").
        tier: Severity tier used for styling.
        description: One-line explanation shown next to the label.
    """

    label: str
    tier: StabilityTier
    description: str
