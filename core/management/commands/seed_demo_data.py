"""Seed a demo training history for one user (idempotent)."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from core.demo import seed_demo_data
from training.models import Athlete
from training.repository import TrainingRepository


class Command(BaseCommand):
    """Write demo runs and races for a user with no runs yet."""

    help = "Seed demo runs and races for a user that has no runs yet."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("--username", required=True, help="Username to seed.")
        parser.add_argument(
            "--create-user",
            action="store_true",
            help="Create the user (unusable password) when it does not exist.",
        )
        parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        username: str = options["username"]
        user_model = get_user_model()
        user = user_model.objects.filter(username=username).first()
        if user is None:
            if not options["create_user"]:
                raise CommandError(f"Unknown user: {username!r}")
            user = user_model.objects.create_user(username=username)

        athlete, _ = Athlete.objects.get_or_create(user=user, defaults={"display_name": username})
        repository = TrainingRepository(athlete)
        repository.seed_default_tracks()

        result = seed_demo_data(repository, seed=options["seed"])
        if not result.seeded:
            self.stdout.write(f"user={username} already has runs; nothing seeded.")
            return None
        self.stdout.write(self.style.SUCCESS(f"user={username} seeded runs={result.runs} races={result.races}"))
        return None
