"""Demo dataset seeding.

Seeds a realistic-looking training history so dashboards render something
meaningful on a fresh account. Seeding is idempotent: an athlete that already
has runs is left untouched.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from django.db import transaction

from training.models import Track, TrainingRecord
from training.repository import RunEntry, TrainingRepository

HEAVY_SESSION_REPS = 20
SCATTERED_SHORT_RUNS = 60
SCATTERED_LONG_RUNS = 30


@dataclass(frozen=True, slots=True)
class DemoSeedResult:
    """Outcome for demo dataset seeding."""

    seeded: bool
    runs: int
    races: int


@dataclass(frozen=True, slots=True)
class _DemoRace:
    name: str
    category: str
    days_from_today: int
    rank: str = ""


_DEMO_RACES: tuple[_DemoRace, ...] = (
    _DemoRace("National Junior Championship", "Age 4 final", 14),
    _DemoRace("Speed Cup Spring Series", "Open", 21),
    _DemoRace("Summer League", "Open", -5, rank="2nd"),
    _DemoRace("Little Riders Club Cup", "Age 3", -200, rank="1st"),
    _DemoRace("Asia Open", "Elite", 45),
    _DemoRace("Weekend Sprint (South leg)", "Points race", -30, rank="5th"),
)


def seed_demo_data(
    repository: TrainingRepository,
    *,
    today: date | None = None,
    seed: int | None = None,
) -> DemoSeedResult:
    """Seed demo runs and races for an athlete with no runs yet.

    Args:
        repository: Athlete-scoped repository to write through.
        today: Reference date; defaults to `date.today()`.
        seed: Optional RNG seed for reproducible datasets.

    Returns:
        DemoSeedResult describing what was written.
    """

    if TrainingRecord.objects.filter(athlete=repository.athlete).exists():
        return DemoSeedResult(seeded=False, runs=0, races=0)

    today = today or date.today()
    rng = random.Random(seed)

    with transaction.atomic():
        short_track = _track_for_distance(repository, meters=10, name="10m Burst sprint")
        long_track = _track_for_distance(repository, meters=30, name="30m Sprint")

        runs = repository.save_runs(
            track_id=short_track.pk,
            entries=[*_heavy_session(rng, today=today), *_scattered_short_runs(rng, today=today)],
        )
        runs += repository.save_runs(track_id=long_track.pk, entries=_scattered_long_runs(rng, today=today))

        for race in _DEMO_RACES:
            repository.save_race(
                name=race.name,
                category=race.category,
                day=today + timedelta(days=race.days_from_today),
                rank=race.rank,
            )

    return DemoSeedResult(seeded=True, runs=runs, races=len(_DEMO_RACES))


def _track_for_distance(repository: TrainingRepository, *, meters: int, name: str) -> Track:
    """Return the athlete's first track of the given distance, creating one if needed."""

    for track in repository.list_tracks():
        if track.distance_meters == meters:
            return track
    return repository.save_track(name=name, distance_meters=meters)


def _at(day: date, *, hour: int = 12) -> datetime:
    return datetime.combine(day, time(hour=hour), tzinfo=timezone.utc)


def _heavy_session(rng: random.Random, *, today: date) -> list[RunEntry]:
    """A 20-rep session yesterday: strong start, fatigue, then a final push."""

    day = today - timedelta(days=1)
    entries: list[RunEntry] = []
    for rep in range(HEAVY_SESSION_REPS):
        base = 2.15
        if rep > 5:
            base += 0.05
        if rep > 15:
            base -= 0.08
        entries.append(
            RunEntry(
                date=day,
                seconds=round(base + rng.uniform(-0.07, 0.08), 4),
                timestamp=_at(day) + timedelta(minutes=2 * rep),
            )
        )
    return entries


def _scattered_short_runs(rng: random.Random, *, today: date) -> list[RunEntry]:
    """Runs spread over the last ~3 months, slower the older they are."""

    entries: list[RunEntry] = []
    for index in range(SCATTERED_SHORT_RUNS):
        day = today - timedelta(days=rng.randrange(90) + 2)
        age_factor = (90 - index) * 0.002
        entries.append(
            RunEntry(
                date=day,
                seconds=round(2.1 + age_factor + rng.uniform(-0.2, 0.2), 4),
                timestamp=_at(day, hour=rng.randrange(7, 20)),
            )
        )
    return entries


def _scattered_long_runs(rng: random.Random, *, today: date) -> list[RunEntry]:
    """Runs spread over the last ~2 months on the longer track."""

    entries: list[RunEntry] = []
    for _ in range(SCATTERED_LONG_RUNS):
        day = today - timedelta(days=rng.randrange(60))
        entries.append(
            RunEntry(
                date=day,
                seconds=round(4.5 + rng.uniform(-0.3, 0.3), 4),
                timestamp=_at(day, hour=rng.randrange(7, 20)),
            )
        )
    return entries
