"""Athlete-scoped persistence operations.

`TrainingRepository` is the only place views and services touch the ORM for
training data. Every query is filtered by the athlete the repository was built
for, so one athlete can never read or delete another athlete's rows. Reads that
feed the Analysis Engine return plain `analysis.dto` objects.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from analysis.dto import TimedRun, TrackInput
from training.models import DEFAULT_TRACKS, Athlete, RaceEvent, Track, TrainingRecord

logger = logging.getLogger(__name__)

SECONDS_QUANTUM = Decimal("0.0001")


class TrainingRecordNotFound(LookupError):
    """Raised when a row does not exist or belongs to another athlete."""


class InvalidRunError(ValueError):
    """Raised when a run time is not a positive number of seconds."""


@dataclass(frozen=True, slots=True)
class RunEntry:
    """A run waiting to be persisted.

    Attributes:
        date: Calendar date of the run.
        seconds: Elapsed time in seconds.
        timestamp: Creation instant used for ordering.
    """

    date: date
    seconds: Decimal | float | str
    timestamp: datetime


def normalize_seconds(value: Decimal | float | str) -> Decimal:
    """Quantize a run time to 4 decimal places and require it to be positive.

    Args:
        value: Raw seconds value.

    Returns:
        The quantized Decimal value.

    Raises:
        InvalidRunError: When the value is not a finite number greater than 0.
    """

    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidRunError(f"Run time must be a finite number, got {value!r}.")
    try:
        seconds = Decimal(str(value).strip()).quantize(SECONDS_QUANTUM)
    except InvalidOperation as exc:
        raise InvalidRunError(f"Run time must be a number, got {value!r}.") from exc
    if not seconds.is_finite() or seconds <= 0:
        raise InvalidRunError(f"Run time must be greater than 0 seconds, got {value!r}.")
    return seconds


def track_input(track: Track) -> TrackInput:
    """Convert a Track row into the Analysis Engine track descriptor."""

    return TrackInput(track_id=track.pk, name=track.name, distance_meters=track.distance_meters)


def timed_run(record: TrainingRecord) -> TimedRun:
    """Convert a TrainingRecord row into an Analysis Engine input."""

    return TimedRun(
        run_id=record.pk,
        date=record.date.isoformat(),
        track_id=record.track_id,
        seconds=float(record.seconds),
        timestamp=record.timestamp,
    )


class TrainingRepository:
    """List/save/delete operations for a single athlete's data."""

    def __init__(self, athlete: Athlete) -> None:
        self.athlete = athlete

    # Tracks

    def list_tracks(self) -> list[Track]:
        """Return the athlete's tracks in creation order."""

        return list(Track.objects.filter(athlete=self.athlete).order_by("created_at", "id"))

    def get_track(self, track_id: int) -> Track:
        """Return one of the athlete's tracks.

        Raises:
            TrainingRecordNotFound: When the track is missing or foreign.
        """

        try:
            return Track.objects.get(athlete=self.athlete, pk=track_id)
        except (Track.DoesNotExist, ValueError, TypeError) as exc:
            raise TrainingRecordNotFound(f"Track {track_id!r} not found.") from exc

    def get_track_by_name(self, name: str) -> Track:
        """Return the athlete's track with an exact name match."""

        try:
            return Track.objects.get(athlete=self.athlete, name=name)
        except Track.DoesNotExist as exc:
            raise TrainingRecordNotFound(f"Track {name!r} not found.") from exc

    def save_track(self, *, name: str, distance_meters: int = 0, track_id: int | None = None) -> Track:
        """Create a track, or rename/re-measure an existing one when `track_id` is given."""

        track = Track(athlete=self.athlete) if track_id is None else self.get_track(track_id)
        track.name = name.strip()
        track.distance_meters = distance_meters
        track.save()
        return track

    def delete_track(self, track_id: int) -> None:
        """Delete a track and every run recorded on it."""

        track = self.get_track(track_id)
        track.delete()
        logger.info("Deleted track %s for athlete %s", track_id, self.athlete.pk)

    def seed_default_tracks(self) -> list[Track]:
        """Create the default tracks when the athlete has none.

        Returns:
            The athlete's tracks after seeding.
        """

        if not Track.objects.filter(athlete=self.athlete).exists():
            created = [
                Track.objects.create(athlete=self.athlete, name=name, distance_meters=meters)
                for name, meters in DEFAULT_TRACKS
            ]
            self.athlete.preferred_track = created[0]
            self.athlete.save(update_fields=["preferred_track"])
        return self.list_tracks()

    def get_preferred_track(self) -> Track | None:
        """Return the preferred track, falling back to the first track."""

        self.athlete.refresh_from_db(fields=["preferred_track"])
        if self.athlete.preferred_track is not None:
            return self.athlete.preferred_track
        return Track.objects.filter(athlete=self.athlete).order_by("created_at", "id").first()

    def set_preferred_track(self, track_id: int) -> Track:
        """Mark one of the athlete's tracks as the default dashboard track."""

        track = self.get_track(track_id)
        self.athlete.preferred_track = track
        self.athlete.save(update_fields=["preferred_track"])
        return track

    # Runs

    def list_runs(self, *, track_id: int | None = None) -> tuple[TimedRun, ...]:
        """Return the athlete's runs as Analysis Engine inputs.

        Args:
            track_id: Optional track filter.

        Returns:
            TimedRun tuples in timestamp order.
        """

        queryset = TrainingRecord.objects.filter(athlete=self.athlete)
        if track_id is not None:
            queryset = queryset.filter(track_id=track_id)
        return tuple(timed_run(record) for record in queryset.order_by("timestamp", "id"))

    def runs_for_day(self, *, track_id: int, day: date) -> list[TrainingRecord]:
        """Return one day's runs on one track in timestamp order."""

        return list(
            TrainingRecord.objects.filter(athlete=self.athlete, track_id=track_id, date=day).order_by(
                "timestamp", "id"
            )
        )

    def recent_records(self, *, track_id: int | None = None, limit: int = 20) -> list[TrainingRecord]:
        """Return the most recently created records, newest first."""

        queryset = TrainingRecord.objects.filter(athlete=self.athlete).select_related("track")
        if track_id is not None:
            queryset = queryset.filter(track_id=track_id)
        return list(queryset.order_by("-timestamp", "-id")[:limit])

    def save_run(
        self,
        *,
        track_id: int,
        day: date,
        seconds: Decimal | float | str,
        timestamp: datetime | None = None,
    ) -> TrainingRecord:
        """Persist a single run.

        Raises:
            InvalidRunError: When `seconds` is not positive.
            TrainingRecordNotFound: When the track is missing or foreign.
        """

        track = self.get_track(track_id)
        return TrainingRecord.objects.create(
            athlete=self.athlete,
            track=track,
            date=day,
            seconds=normalize_seconds(seconds),
            timestamp=timestamp or timezone.now(),
        )

    def save_runs(self, *, track_id: int, entries: Iterable[RunEntry]) -> int:
        """Persist a batch of runs atomically.

        Returns:
            Number of rows created.
        """

        track = self.get_track(track_id)
        rows = [
            TrainingRecord(
                athlete=self.athlete,
                track=track,
                date=entry.date,
                seconds=normalize_seconds(entry.seconds),
                timestamp=entry.timestamp,
            )
            for entry in entries
        ]
        with transaction.atomic():
            TrainingRecord.objects.bulk_create(rows)
        return len(rows)

    def delete_run(self, run_id: int) -> None:
        """Delete one of the athlete's runs."""

        deleted, _ = TrainingRecord.objects.filter(athlete=self.athlete, pk=run_id).delete()
        if not deleted:
            raise TrainingRecordNotFound(f"Run {run_id!r} not found.")

    # Races

    def list_races(self) -> list[RaceEvent]:
        """Return the athlete's races ordered by date."""

        return list(RaceEvent.objects.filter(athlete=self.athlete).order_by("date", "id"))

    def get_race(self, race_id: int) -> RaceEvent:
        """Return one of the athlete's races."""

        try:
            return RaceEvent.objects.get(athlete=self.athlete, pk=race_id)
        except (RaceEvent.DoesNotExist, ValueError, TypeError) as exc:
            raise TrainingRecordNotFound(f"Race {race_id!r} not found.") from exc

    def save_race(
        self,
        *,
        name: str,
        category: str,
        day: date,
        rank: str = "",
        notes: str = "",
        photo: bytes | None = None,
        clear_photo: bool = False,
        race_id: int | None = None,
    ) -> RaceEvent:
        """Create or update a race.

        Args:
            photo: New JPEG thumbnail; None keeps the stored photo.
            clear_photo: Remove the stored photo (ignored when `photo` is given).
            race_id: Existing race to update; None creates a new race.
        """

        race = RaceEvent(athlete=self.athlete) if race_id is None else self.get_race(race_id)
        race.name = name.strip()
        race.category = category.strip()
        race.date = day
        race.rank = rank.strip()
        race.notes = notes
        if photo is not None:
            race.photo = photo
        elif clear_photo:
            race.photo = None
        race.save()
        return race

    def delete_race(self, race_id: int) -> None:
        """Delete one of the athlete's races."""

        deleted, _ = RaceEvent.objects.filter(athlete=self.athlete, pk=race_id).delete()
        if not deleted:
            raise TrainingRecordNotFound(f"Race {race_id!r} not found.")

    def clear_all(self) -> None:
        """Delete all of the athlete's data and restore the default tracks."""

        with transaction.atomic():
            RaceEvent.objects.filter(athlete=self.athlete).delete()
            TrainingRecord.objects.filter(athlete=self.athlete).delete()
            Track.objects.filter(athlete=self.athlete).delete()
            self.athlete.preferred_track = None
            self.athlete.save(update_fields=["preferred_track"])
            self.seed_default_tracks()
        logger.info("Cleared all training data for athlete %s", self.athlete.pk)
