"""Signals for Athlete lifecycle."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from training.models import Athlete
from training.repository import TrainingRepository

UserModel = get_user_model()


@receiver(post_save, sender=UserModel)
def ensure_athlete_for_user(sender, instance, created: bool, **kwargs) -> None:
    """Create an Athlete with the default tracks whenever a new User is created.

    The Athlete is derived from `instance` and never from user input.
    """

    if kwargs.get("raw", False):
        return

    if not created:
        return

    athlete, _ = Athlete.objects.get_or_create(
        user=instance,
        defaults={"display_name": instance.get_username()},
    )
    TrainingRepository(athlete).seed_default_tracks()
