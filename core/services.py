"""Service-layer functions for the core app.

Services in `core` coordinate athlete-scoped persistence (via
`TrainingRepository`) with the pure analysis and parsing modules.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from django.utils import timezone

from analysis.dto import DayStats, StabilityLabel, TrackStatistics
from analysis.engine import compute_track_statistics
from analysis.stability import classify_stability
from core.parsers.csv_records import parse_records_csv
from training.models import RaceEvent, Track, TrainingRecord
from training.repository import InvalidRunError, RunEntry, TrainingRepository, normalize_seconds, track_input

logger = logging.getLogger(__name__)

MAX_DASHBOARD_RACES = 2


@dataclass(frozen=True, slots=True)
class DayRow:
    """A daily statistics entry paired with its stability label."""

    stats: DayStats
    stability: StabilityLabel


@dataclass(frozen=True, slots=True)
class UpcomingRace:
    """A race with its countdown in days."""

    race: RaceEvent
    days_left: int


@dataclass(frozen=True)
class TrackDashboard:
    """Everything the dashboard renders for one track.

    Attributes:
        track: Selected track, or None when the athlete has no tracks.
        tracks: All of the athlete's tracks for the selector.
        statistics: Daily and weekly statistics for `track`.
        day_rows: Daily statistics with stability labels, most recent first.
        latest_stability: Label for the most recent day, if any.
        upcoming_races: Up to two unfinished future races, soonest first.
        more_races_count: Unfinished future races not shown in `upcoming_races`.
    """

    track: Track | None
    tracks: tuple[Track, ...]
    statistics: TrackStatistics
    day_rows: tuple[DayRow, ...] = ()
    latest_stability: StabilityLabel | None = None
    upcoming_races: tuple[UpcomingRace, ...] = ()
    more_races_count: int = 0


@dataclass(frozen=True)
class DayDetail:
    """One day of runs on one track."""

    track: Track
    day: date
    records: tuple[TrainingRecord, ...]
    stats: DayStats | None
    stability: StabilityLabel | None


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of a CSV import.

    Attributes:
        imported: Rows written.
        skipped_lines: 1-based numbers of rejected lines.
    """

    imported: int
    skipped_lines: tuple[int, ...]


def log_run(
    repository: TrainingRepository,
    *,
    track_id: int,
    day: date,
    seconds: Decimal | float | str,
) -> TrainingRecord:
    """Record a single run timed now.

    Raises:
        InvalidRunError: When `seconds` is not positive.
        TrainingRecordNotFound: When the track is missing or foreign.
    """

    record = repository.save_run(track_id=track_id, day=day, seconds=seconds, timestamp=timezone.now())
    logger.debug("Logged run %s on track %s", record.pk, track_id)
    return record


def import_records_csv(
    repository: TrainingRepository,
    *,
    track_id: int,
    text: str,
    default_date: date,
) -> ImportResult:
    """Parse CSV text and store every valid row on one track.

    Args:
        repository: Athlete-scoped repository.
        track_id: Track that receives every imported run.
        text: Uploaded CSV text.
        default_date: Date used for lines that only contain seconds.

    Returns:
        ImportResult with the number of rows written and skipped lines.
    """

    parsed = parse_records_csv(text, default_date=default_date)
    entries: list[RunEntry] = []
    skipped = list(parsed.skipped_lines)
    for row in parsed.rows:
        try:
            normalize_seconds(row.seconds)
        except InvalidRunError:
            skipped.append(row.line_number)
            continue
        entries.append(RunEntry(date=row.date, seconds=row.seconds, timestamp=row.timestamp))

    imported = 0
    if entries:
        imported = repository.save_runs(track_id=track_id, entries=entries)
    skipped_lines = tuple(sorted(skipped))
    logger.info(
        "Imported %d run(s) into track %s (%d line(s) skipped)",
        imported,
        track_id,
        len(skipped_lines),
    )
    return ImportResult(imported=imported, skipped_lines=skipped_lines)


def resolve_track(repository: TrainingRepository, track_id: int | None) -> Track | None:
    """Return the requested track, else the preferred track, else None."""

    if track_id is not None:
        return repository.get_track(track_id)
    return repository.get_preferred_track()


def track_dashboard(
    repository: TrainingRepository,
    *,
    track_id: int | None = None,
    today: date | None = None,
) -> TrackDashboard:
    """Assemble the dashboard for the selected (or preferred) track.

    Raises:
        TrainingRecordNotFound: When `track_id` is given but not owned.
    """

    today = today or timezone.localdate()
    tracks = tuple(repository.list_tracks())
    track = resolve_track(repository, track_id)
    upcoming, more = upcoming_races(repository.list_races(), today=today)

    if track is None:
        return TrackDashboard(
            track=None,
            tracks=tracks,
            statistics=TrackStatistics(),
            upcoming_races=upcoming,
            more_races_count=more,
        )

    statistics = compute_track_statistics(
        repository.list_runs(track_id=track.pk),
        track_input(track),
        today=today,
    )
    day_rows = tuple(
        DayRow(stats=stats, stability=classify_stability(stats.stability_score, stats.count))
        for stats in statistics.daily_stats
    )
    return TrackDashboard(
        track=track,
        tracks=tracks,
        statistics=statistics,
        day_rows=day_rows,
        latest_stability=day_rows[0].stability if day_rows else None,
        upcoming_races=upcoming,
        more_races_count=more,
    )


def day_detail(repository: TrainingRepository, *, track_id: int, day: date) -> DayDetail:
    """Return one day's runs on one track, with that day's statistics."""

    track = repository.get_track(track_id)
    records = tuple(repository.runs_for_day(track_id=track.pk, day=day))
    statistics = compute_track_statistics(
        repository.list_runs(track_id=track.pk),
        track_input(track),
    )
    key = day.isoformat()
    stats = next((entry for entry in statistics.daily_stats if entry.date == key), None)
    stability = classify_stability(stats.stability_score, stats.count) if stats is not None else None
    return DayDetail(track=track, day=day, records=records, stats=stats, stability=stability)


def upcoming_races(
    races: Iterable[RaceEvent],
    *,
    today: date,
    limit: int = MAX_DASHBOARD_RACES,
) -> tuple[tuple[UpcomingRace, ...], int]:
    """Select unfinished races after today, soonest first.

    Returns:
        A tuple of (visible races, count of additional races not shown).
    """

    pending = sorted(
        (race for race in races if race.date > today and not race.is_finished),
        key=lambda race: (race.date, race.pk),
    )
    visible = tuple(UpcomingRace(race=race, days_left=race.days_until(today)) for race in pending[:limit])
    return visible, max(0, len(pending) - limit)


def race_roster(
    races: Iterable[RaceEvent],
    *,
    today: date,
    search: str = "",
    category: str = "",
) -> list[RaceEvent]:
    """Filter and order races for the race manager.

    Races today or later come first, soonest first; past races follow, most
    recent first.

    Args:
        races: The athlete's races.
        today: Reference date.
        search: Case-insensitive substring matched against the race name.
        category: Exact category filter; empty matches all.
    """

    needle = search.strip().casefold()
    matched = [
        race
        for race in races
        if needle in race.name.casefold() and (not category or race.category == category)
    ]
    future = sorted((race for race in matched if race.date >= today), key=lambda race: (race.date, race.pk))
    past = sorted(
        (race for race in matched if race.date < today),
        key=lambda race: (race.date, race.pk),
        reverse=True,
    )
    return [*future, *past]
