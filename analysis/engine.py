"""Orchestration entry points for the Analysis Engine.

The Analysis Engine is a pure, non-Django module that accepts in-memory inputs
and returns DTOs. It must not import Django or perform database writes.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .aggregations import mean, population_std_dev, stability_score
from .dto import DayStats, TimedRun, TrackInput, TrackStatistics, WeeklyTrend
from .rates import speed_kmh
from .weeks import WeekWindow, parse_calendar_date, trailing_weeks

CURRENT_WEEK_LABEL = "This week"


def compute_track_statistics(
    runs: Iterable[TimedRun],
    track: TrackInput,
    *,
    today: date | None = None,
) -> TrackStatistics:
    """Compute daily and weekly statistics for a single track.

    Args:
        runs: Timed runs in any order; runs for other tracks are ignored.
        track: Track whose id filters the runs and whose distance drives speed.
        today: Reference date anchoring the weekly window. Defaults to
            `date.today()`.

    Returns:
        TrackStatistics with one DayStats per distinct date (most recent first)
        and exactly four WeeklyTrend entries (oldest first).

    Notes:
        Never raises on data. Runs whose date does not parse as a calendar date
        still appear in the daily view but are left out of weekly buckets.
    """

    if today is None:
        today = date.today()

    track_runs = sorted(
        (run for run in runs if run.track_id == track.track_id),
        key=lambda run: run.timestamp,
    )

    return TrackStatistics(
        daily_stats=_daily_stats(track_runs, track=track),
        weekly_trend=_weekly_trend(track_runs, today=today),
    )


def group_runs_by_date(runs: Iterable[TimedRun]) -> dict[str, list[TimedRun]]:
    """Group runs by their exact `date` string, preserving first-seen order."""

    grouped: dict[str, list[TimedRun]] = {}
    for run in runs:
        grouped.setdefault(run.date, []).append(run)
    return grouped


def _daily_stats(runs: list[TimedRun], *, track: TrackInput) -> tuple[DayStats, ...]:
    """Summarize each date group and order the result most recent first."""

    daily: list[DayStats] = []
    for day, day_runs in group_runs_by_date(runs).items():
        times = [run.seconds for run in day_runs]
        avg_seconds = mean(times)
        std_dev = population_std_dev(times)
        daily.append(
            DayStats(
                date=day,
                avg_seconds=avg_seconds,
                best_seconds=min(times),
                avg_speed_kmh=speed_kmh(track.distance_meters, avg_seconds),
                std_dev=std_dev,
                count=len(times),
                stability_score=stability_score(
                    std_dev=std_dev, average=avg_seconds, count=len(times)
                ),
            )
        )

    # Calendar order; unparseable strings sort after every real date.
    daily.sort(key=lambda stats: (parse_calendar_date(stats.date) or date.min, stats.date), reverse=True)
    return tuple(daily)


def _weekly_trend(runs: list[TimedRun], *, today: date) -> tuple[WeeklyTrend, ...]:
    """Bucket runs into the trailing four Monday-aligned weeks."""

    dated: list[tuple[date, TimedRun]] = []
    for run in runs:
        run_date = parse_calendar_date(run.date)
        if run_date is not None:
            dated.append((run_date, run))

    trend: list[WeeklyTrend] = []
    for window in trailing_weeks(today):
        times = [run.seconds for run_date, run in dated if window.contains(run_date)]
        trend.append(_week_entry(window, times))
    return tuple(trend)


def _week_entry(window: WeekWindow, times: list[float]) -> WeeklyTrend:
    """Build a WeeklyTrend entry, zero-filled when the week has no runs."""

    label = CURRENT_WEEK_LABEL if window.offset == 0 else window.start.strftime("%m/%d")
    if not times:
        return WeeklyTrend(
            week_label=label,
            week_start_date=window.start.isoformat(),
            avg_seconds=0.0,
            best_seconds=0.0,
            record_count=0,
        )
    return WeeklyTrend(
        week_label=label,
        week_start_date=window.start.isoformat(),
        avg_seconds=mean(times),
        best_seconds=min(times),
        record_count=len(times),
    )
