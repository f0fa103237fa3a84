"""Integration tests for athlete-scoped persistence."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from training.models import Athlete, RaceEvent, Track, TrainingRecord
from training.repository import InvalidRunError, RunEntry, TrainingRecordNotFound, TrainingRepository, normalize_seconds

pytestmark = pytest.mark.integration


@pytest.fixture
def repository(athlete) -> TrainingRepository:
    return TrainingRepository(athlete)


@pytest.fixture
def other_repository(db) -> TrainingRepository:
    other = get_user_model().objects.create_user(username="bob", password="password")
    return TrainingRepository(other.athlete)


@pytest.mark.django_db
def test_new_user_gets_athlete_with_default_tracks(user) -> None:
    """Creating a user provisions an Athlete with two default tracks."""

    athlete = user.athlete
    names = [(track.name, track.distance_meters) for track in TrainingRepository(athlete).list_tracks()]

    assert names == [("10m Burst sprint", 10), ("30m Sprint", 30)]
    assert athlete.preferred_track.name == "10m Burst sprint"


@pytest.mark.django_db
def test_signal_ignores_raw_saves_and_updates(user) -> None:
    """Saving an existing user does not create another Athlete."""

    user.first_name = "Alice"
    user.save()

    assert Athlete.objects.filter(user=user).count() == 1
    assert Track.objects.filter(athlete=user.athlete).count() == 2


def test_normalize_seconds_quantizes_and_rejects_non_positive() -> None:
    """Run times are stored with four decimal places and must be positive."""

    assert normalize_seconds("2.123456") == Decimal("2.1235")
    assert normalize_seconds(2.5) == Decimal("2.5000")
    for bad in ("0", -1, "abc", float("nan"), float("inf")):
        with pytest.raises(InvalidRunError):
            normalize_seconds(bad)


@pytest.mark.django_db
def test_save_run_and_list_runs_as_analysis_inputs(repository) -> None:
    """Stored runs come back as TimedRun values in timestamp order."""

    track = repository.get_preferred_track()
    later = datetime(2024, 1, 2, 9, tzinfo=timezone.utc)
    earlier = later - timedelta(minutes=5)
    repository.save_run(track_id=track.pk, day=date(2024, 1, 2), seconds="2.2", timestamp=later)
    repository.save_run(track_id=track.pk, day=date(2024, 1, 2), seconds="2.1", timestamp=earlier)

    runs = repository.list_runs(track_id=track.pk)

    assert [run.seconds for run in runs] == [2.1, 2.2]
    assert {run.date for run in runs} == {"2024-01-02"}
    assert all(run.track_id == track.pk for run in runs)


@pytest.mark.django_db
def test_save_run_rejects_invalid_seconds(repository) -> None:
    """Zero-second runs never reach the database."""

    track = repository.get_preferred_track()

    with pytest.raises(InvalidRunError):
        repository.save_run(track_id=track.pk, day=date(2024, 1, 2), seconds=0)
    assert TrainingRecord.objects.count() == 0


@pytest.mark.django_db
def test_save_runs_is_atomic_on_invalid_entry(repository) -> None:
    """A bad entry in a batch stores nothing."""

    track = repository.get_preferred_track()
    stamp = datetime(2024, 1, 2, tzinfo=timezone.utc)
    entries = [
        RunEntry(date=date(2024, 1, 2), seconds=2.1, timestamp=stamp),
        RunEntry(date=date(2024, 1, 2), seconds=-1, timestamp=stamp),
    ]

    with pytest.raises(InvalidRunError):
        repository.save_runs(track_id=track.pk, entries=entries)
    assert TrainingRecord.objects.count() == 0


@pytest.mark.django_db
def test_repository_is_scoped_to_one_athlete(repository, other_repository) -> None:
    """One athlete cannot read, write or delete another athlete's rows."""

    foreign_track = other_repository.get_preferred_track()
    foreign_run = other_repository.save_run(track_id=foreign_track.pk, day=date(2024, 1, 2), seconds=2.0)
    foreign_race = other_repository.save_race(name="Cup", category="Open", day=date(2024, 2, 1))

    with pytest.raises(TrainingRecordNotFound):
        repository.get_track(foreign_track.pk)
    with pytest.raises(TrainingRecordNotFound):
        repository.save_run(track_id=foreign_track.pk, day=date(2024, 1, 2), seconds=2.0)
    with pytest.raises(TrainingRecordNotFound):
        repository.delete_run(foreign_run.pk)
    with pytest.raises(TrainingRecordNotFound):
        repository.delete_race(foreign_race.pk)

    assert repository.list_runs() == ()
    assert repository.list_races() == []
    assert TrainingRecord.objects.filter(pk=foreign_run.pk).exists()


@pytest.mark.django_db
def test_delete_track_removes_its_runs(repository) -> None:
    """Deleting a track cascades to its runs and drops the preference."""

    track = repository.get_preferred_track()
    repository.save_run(track_id=track.pk, day=date(2024, 1, 2), seconds=2.0)

    repository.delete_track(track.pk)

    assert TrainingRecord.objects.count() == 0
    assert repository.get_preferred_track().name == "30m Sprint"


@pytest.mark.django_db
def test_save_track_renames_and_set_preferred(repository) -> None:
    """Tracks can be renamed and chosen as the default."""

    second = repository.list_tracks()[1]

    renamed = repository.save_track(track_id=second.pk, name=" 40m Flying ", distance_meters=40)
    repository.set_preferred_track(second.pk)

    assert renamed.name == "40m Flying"
    assert repository.get_preferred_track().pk == second.pk
    assert repository.get_track_by_name("40m Flying").distance_meters == 40


@pytest.mark.django_db
def test_save_race_keeps_photo_unless_cleared(repository) -> None:
    """Updating a race without a new photo keeps the stored one."""

    race = repository.save_race(name="Cup", category="Open", day=date(2024, 2, 1), photo=b"jpeg")

    kept = repository.save_race(race_id=race.pk, name="Cup", category="Open", day=date(2024, 2, 1), rank="1st")
    assert kept.has_photo
    assert kept.is_finished

    cleared = repository.save_race(race_id=race.pk, name="Cup", category="Open", day=date(2024, 2, 1), clear_photo=True)
    assert not RaceEvent.objects.get(pk=cleared.pk).has_photo


@pytest.mark.django_db
def test_clear_all_restores_defaults(repository) -> None:
    """Clearing removes runs, races and custom tracks, then reseeds defaults."""

    custom = repository.save_track(name="Hill", distance_meters=50)
    repository.save_run(track_id=custom.pk, day=date(2024, 1, 2), seconds=6.0)
    repository.save_race(name="Cup", category="Open", day=date(2024, 2, 1))

    repository.clear_all()

    assert TrainingRecord.objects.count() == 0
    assert RaceEvent.objects.count() == 0
    assert [track.name for track in repository.list_tracks()] == ["10m Burst sprint", "30m Sprint"]
    assert repository.get_preferred_track().name == "10m Burst sprint"
