"""Integration tests for the demo dataset."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from core.demo import HEAVY_SESSION_REPS, seed_demo_data
from core.services import track_dashboard
from training.repository import TrainingRepository

pytestmark = pytest.mark.integration

TODAY = date(2024, 6, 12)


@pytest.mark.django_db
def test_seed_demo_data_builds_a_realistic_history(athlete) -> None:
    """The demo covers both default tracks and a mix of races."""

    repository = TrainingRepository(athlete)

    result = seed_demo_data(repository, today=TODAY, seed=1)

    assert result.seeded is True
    assert result.races == 6
    short, long = repository.list_tracks()
    yesterday = (TODAY - timedelta(days=1)).isoformat()
    short_runs = repository.list_runs(track_id=short.pk)
    assert sum(1 for run in short_runs if run.date == yesterday) == HEAVY_SESSION_REPS
    assert len(repository.list_runs(track_id=long.pk)) == 30
    assert all(run.seconds > 0 for run in short_runs)
    assert sum(1 for race in repository.list_races() if race.is_finished) == 3


@pytest.mark.django_db
def test_seeded_dashboard_has_labelled_heavy_session(athlete) -> None:
    """Yesterday's 20-rep session is the most recent day on the dashboard."""

    repository = TrainingRepository(athlete)
    seed_demo_data(repository, today=TODAY, seed=3)

    board = track_dashboard(repository, today=TODAY)

    latest = board.day_rows[0]
    assert latest.stats.date == (TODAY - timedelta(days=1)).isoformat()
    assert latest.stats.count == HEAVY_SESSION_REPS
    assert latest.stability.label != "Insufficient data"
    assert len(board.upcoming_races) == 2
    assert board.more_races_count == 1


@pytest.mark.django_db
def test_seed_demo_data_skips_athletes_with_runs(athlete) -> None:
    """Existing training history is never overwritten."""

    repository = TrainingRepository(athlete)
    repository.save_run(track_id=repository.get_preferred_track().pk, day=TODAY, seconds=2)

    result = seed_demo_data(repository, today=TODAY)

    assert result.seeded is False
    assert len(repository.list_runs()) == 1
