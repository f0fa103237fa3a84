"""Import `date,seconds` CSV runs into one of a user's tracks."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from core.services import import_records_csv
from training.models import Athlete
from training.repository import TrainingRecordNotFound, TrainingRepository


class Command(BaseCommand):
    """Import runs from a CSV file."""

    help = "Import runs from a CSV file (YYYY-MM-DD,seconds or seconds per line)."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("path", help="Path to the CSV file.")
        parser.add_argument("--username", required=True, help="Owner of the runs.")
        parser.add_argument("--track", required=True, help="Track name to import into.")
        parser.add_argument(
            "--date",
            default=None,
            help="Date (YYYY-MM-DD) for lines that only contain seconds (default: today).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        path = Path(options["path"])
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}") from exc

        default_date = timezone.localdate()
        if options["date"]:
            try:
                default_date = date.fromisoformat(options["date"])
            except ValueError as exc:
                raise CommandError(f"Invalid --date: {options['date']!r}") from exc

        username: str = options["username"]
        user = get_user_model().objects.filter(username=username).first()
        if user is None:
            raise CommandError(f"Unknown user: {username!r}")
        athlete, _ = Athlete.objects.get_or_create(user=user, defaults={"display_name": username})
        repository = TrainingRepository(athlete)

        try:
            track = repository.get_track_by_name(options["track"])
        except TrainingRecordNotFound as exc:
            raise CommandError(str(exc)) from exc

        result = import_records_csv(repository, track_id=track.pk, text=text, default_date=default_date)
        self.stdout.write(
            f"user={username} track={track.name!r} imported={result.imported} "
            f"skipped={len(result.skipped_lines)}"
        )
        if result.skipped_lines:
            self.stderr.write("Skipped line(s): " + ", ".join(str(line) for line in result.skipped_lines))
        return None
