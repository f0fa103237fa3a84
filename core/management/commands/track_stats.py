"""Print daily statistics and the 4-week trend for one track."""

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from core.services import track_dashboard
from training.models import Athlete
from training.repository import TrainingRecordNotFound, TrainingRepository


class Command(BaseCommand):
    """Report track statistics on stdout."""

    help = "Print daily statistics and the 4-week trend for a track."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("--username", required=True, help="Owner of the track.")
        parser.add_argument("--track", default=None, help="Track name (default: preferred track).")
        parser.add_argument("--today", default=None, help="Reference date YYYY-MM-DD (default: today).")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        today = None
        if options["today"]:
            try:
                today = date.fromisoformat(options["today"])
            except ValueError as exc:
                raise CommandError(f"Invalid --today: {options['today']!r}") from exc

        username: str = options["username"]
        user = get_user_model().objects.filter(username=username).first()
        if user is None:
            raise CommandError(f"Unknown user: {username!r}")
        athlete, _ = Athlete.objects.get_or_create(user=user, defaults={"display_name": username})
        repository = TrainingRepository(athlete)

        try:
            track_id = repository.get_track_by_name(options["track"]).pk if options["track"] else None
            board = track_dashboard(repository, track_id=track_id, today=today)
        except TrainingRecordNotFound as exc:
            raise CommandError(str(exc)) from exc
        if board.track is None:
            raise CommandError(f"User {username!r} has no tracks.")

        self.stdout.write(f"Track: {board.track.name} ({board.track.distance_meters} m)")
        self.stdout.write("Daily:")
        if not board.day_rows:
            self.stdout.write("  no runs")
        for row in board.day_rows:
            stats = row.stats
            self.stdout.write(
                f"  {stats.date}  avg={stats.avg_seconds:.3f}s best={stats.best_seconds:.3f}s "
                f"n={stats.count} stability={stats.stability_score:.0f} ({row.stability.label})"
            )
        self.stdout.write("Weekly:")
        for week in board.statistics.weekly_trend:
            if week.has_data:
                self.stdout.write(
                    f"  {week.week_label:<10} avg={week.avg_seconds:.3f}s best={week.best_seconds:.3f}s "
                    f"n={week.record_count}"
                )
            else:
                self.stdout.write(f"  {week.week_label:<10} No data")
        return None
