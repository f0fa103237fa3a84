"""Tests for dashboard assembly, CSV import and race ordering services."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from core.parsers.csv_records import ParsedCsvImport, ParsedCsvRow
from core.services import (
    day_detail,
    import_records_csv,
    log_run,
    race_roster,
    track_dashboard,
    upcoming_races,
)
from training.models import RaceEvent
from training.repository import InvalidRunError, TrainingRecordNotFound, TrainingRepository

TODAY = date(2024, 1, 24)


def _race(pk: int, name: str, day: date, *, category: str = "Open", rank: str = "") -> RaceEvent:
    return RaceEvent(pk=pk, name=name, category=category, date=day, rank=rank)


@pytest.mark.unit
def test_upcoming_races_shows_two_soonest_unfinished_future_races() -> None:
    """Races today, finished races and past races are excluded."""

    races = [
        _race(1, "Later", date(2024, 3, 1)),
        _race(2, "Today", TODAY),
        _race(3, "Soon", date(2024, 1, 27)),
        _race(4, "Done early", date(2024, 1, 30), rank="1st"),
        _race(5, "Next", date(2024, 2, 10)),
        _race(6, "Past", date(2024, 1, 1)),
    ]

    visible, more = upcoming_races(races, today=TODAY)

    assert [(item.race.name, item.days_left) for item in visible] == [("Soon", 3), ("Next", 17)]
    assert more == 1


@pytest.mark.unit
def test_race_roster_orders_future_then_past_and_filters() -> None:
    """Upcoming races ascend, past races descend; search and category filter."""

    races = [
        _race(1, "Spring Cup", date(2024, 3, 1)),
        _race(2, "Winter Cup", date(2023, 12, 1), rank="2nd"),
        _race(3, "Club Night", TODAY, category="Club"),
        _race(4, "Autumn Cup", date(2023, 10, 1), rank="5th"),
    ]

    assert [race.pk for race in race_roster(races, today=TODAY)] == [3, 1, 2, 4]
    assert [race.pk for race in race_roster(races, today=TODAY, search="cup")] == [1, 2, 4]
    assert [race.pk for race in race_roster(races, today=TODAY, category="Club")] == [3]


@pytest.mark.integration
@pytest.mark.django_db
def test_track_dashboard_uses_preferred_track_and_labels_days(athlete) -> None:
    """The dashboard defaults to the preferred track and labels each day."""

    repository = TrainingRepository(athlete)
    track = repository.get_preferred_track()
    for seconds in ("2.00", "2.00", "2.00"):
        repository.save_run(track_id=track.pk, day=date(2024, 1, 23), seconds=seconds)
    repository.save_run(track_id=track.pk, day=date(2024, 1, 22), seconds="2.5")
    repository.save_race(name="Cup", category="Open", day=date(2024, 2, 1))

    board = track_dashboard(repository, today=TODAY)

    assert board.track == track
    assert len(board.tracks) == 2
    assert [row.stats.date for row in board.day_rows] == ["2024-01-23", "2024-01-22"]
    assert board.latest_stability.label == "Exceptional precision"
    assert board.day_rows[1].stability.label == "Insufficient data"
    assert board.statistics.weekly_trend[-1].record_count == 4
    assert [item.days_left for item in board.upcoming_races] == [8]


@pytest.mark.integration
@pytest.mark.django_db
def test_track_dashboard_rejects_foreign_track(athlete) -> None:
    """Unknown track ids surface as TrainingRecordNotFound."""

    with pytest.raises(TrainingRecordNotFound):
        track_dashboard(TrainingRepository(athlete), track_id=999_999)


@pytest.mark.integration
@pytest.mark.django_db
def test_log_run_validates_and_day_detail_lists_runs(athlete) -> None:
    """Logged runs appear in the day detail in entry order."""

    repository = TrainingRepository(athlete)
    track = repository.get_preferred_track()
    log_run(repository, track_id=track.pk, day=date(2024, 1, 23), seconds="2.3")
    log_run(repository, track_id=track.pk, day=date(2024, 1, 23), seconds="2.1")
    with pytest.raises(InvalidRunError):
        log_run(repository, track_id=track.pk, day=date(2024, 1, 23), seconds="0")

    detail = day_detail(repository, track_id=track.pk, day=date(2024, 1, 23))

    assert [str(record.seconds) for record in detail.records] == ["2.3000", "2.1000"]
    assert detail.stats.count == 2
    assert detail.stability.label == "Insufficient data"


@pytest.mark.integration
@pytest.mark.django_db
def test_import_records_csv_stores_valid_rows(athlete) -> None:
    """Valid rows are stored on the chosen track; bad lines are reported."""

    repository = TrainingRepository(athlete)
    track = repository.list_tracks()[1]

    result = import_records_csv(
        repository,
        track_id=track.pk,
        text="Date,Seconds\n2024-01-20,4.51\nbad\n4.40\n",
        default_date=date(2024, 1, 21),
    )

    assert result.imported == 2
    assert result.skipped_lines == (3,)
    runs = repository.list_runs(track_id=track.pk)
    assert [(run.date, run.seconds) for run in runs] == [("2024-01-20", 4.51), ("2024-01-21", 4.4)]
    assert runs[0].timestamp < runs[1].timestamp
    assert runs[0].timestamp.tzinfo is not None
    assert runs[0].timestamp.date() == datetime(2024, 1, 20, tzinfo=timezone.utc).date()


@pytest.mark.integration
@pytest.mark.django_db
def test_import_records_csv_skips_rows_that_round_to_zero(athlete) -> None:
    """A sub-precision time is skipped while the rest of the file imports."""

    repository = TrainingRepository(athlete)
    track = repository.get_preferred_track()

    result = import_records_csv(
        repository,
        track_id=track.pk,
        text="2024-01-01,2.1\n2024-01-01,0.00001\n",
        default_date=date(2024, 1, 2),
    )

    assert result.imported == 1
    assert result.skipped_lines == (2,)
    assert [run.seconds for run in repository.list_runs(track_id=track.pk)] == [2.1]


@pytest.mark.integration
@pytest.mark.django_db
def test_import_records_csv_skips_rows_the_repository_rejects(athlete, monkeypatch) -> None:
    """Rows that fail run validation are reported instead of aborting the batch."""

    repository = TrainingRepository(athlete)
    track = repository.get_preferred_track()
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    parsed = ParsedCsvImport(
        rows=(
            ParsedCsvRow(line_number=1, date=date(2024, 1, 1), seconds=2.1, timestamp=stamp),
            ParsedCsvRow(line_number=3, date=date(2024, 1, 1), seconds=0.00001, timestamp=stamp),
        ),
        skipped_lines=(2,),
    )
    monkeypatch.setattr("core.services.parse_records_csv", lambda text, *, default_date: parsed)

    result = import_records_csv(repository, track_id=track.pk, text="", default_date=date(2024, 1, 1))

    assert result.imported == 1
    assert result.skipped_lines == (2, 3)
