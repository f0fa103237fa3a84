"""Database models for athlete-owned training data.

Every row is scoped to an Athlete. Derived statistics are never stored here;
they are recomputed from TrainingRecord rows by the Analysis Engine.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

DEFAULT_TRACKS: tuple[tuple[str, int], ...] = (
    ("10m Burst sprint", 10),
    ("30m Sprint", 30),
)


class Athlete(models.Model):
    """Root entity that owns tracks, runs and races for one user."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="athlete",
    )
    display_name = models.CharField(max_length=80)
    preferred_track = models.ForeignKey(
        "Track",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        """Return the athlete display name."""

        return self.display_name


class Track(models.Model):
    """A named fixed-distance course or drill (e.g. "30m Sprint").

    Attributes:
        athlete: Owning athlete.
        name: Display name, unique per athlete.
        distance_meters: Course length; 0 hides speed display.
    """

    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="tracks")
    name = models.CharField(max_length=80)
    distance_meters = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["athlete", "name"], name="uniq_athlete_track_name")
        ]

    def __str__(self) -> str:
        """Return the track name."""

        return self.name


class TrainingRecord(models.Model):
    """One timed run.

    Attributes:
        athlete: Owning athlete.
        track: Track the run was timed on.
        date: Calendar date the athlete assigned to the run (may be backdated).
        seconds: Elapsed time with 4 decimal places.
        timestamp: Instant the record was created; orders runs within a day.
    """

    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="records")
    track = models.ForeignKey(Track, on_delete=models.CASCADE, related_name="records")
    date = models.DateField()
    seconds = models.DecimalField(
        max_digits=9,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["timestamp", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(seconds__gt=0),
                name="training_record_seconds_positive",
            )
        ]
        indexes = [models.Index(fields=["athlete", "track", "date"], name="training_record_lookup_idx")]

    def __str__(self) -> str:
        """Return a concise display string for admin/debug usage."""

        return f"TrainingRecord(track={self.track_id}, date={self.date}, seconds={self.seconds})"


class RaceEvent(models.Model):
    """A race on the athlete's calendar.

    A race counts as finished once a rank is recorded.
    """

    athlete = models.ForeignKey(Athlete, on_delete=models.CASCADE, related_name="races")
    name = models.CharField(max_length=120)
    category = models.CharField(max_length=80)
    date = models.DateField()
    rank = models.CharField(max_length=40, blank=True)
    notes = models.TextField(blank=True)
    photo = models.BinaryField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "id"]

    def __str__(self) -> str:
        """Return the race name and date."""

        return f"{self.name} ({self.date.isoformat()})"

    @property
    def is_finished(self) -> bool:
        """Return True when a result has been recorded."""

        return bool(self.rank.strip())

    @property
    def has_photo(self) -> bool:
        """Return True when a thumbnail is stored."""

        return bool(self.photo)

    def days_until(self, today: date) -> int:
        """Return whole days from `today` to the race date (negative when past)."""

        return (self.date - today).days
