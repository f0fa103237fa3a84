"""Django app configuration for training data."""

from __future__ import annotations

from django.apps import AppConfig


class TrainingConfig(AppConfig):
    """AppConfig for athlete-owned tracks, runs and races."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "training"

    def ready(self) -> None:
        """Register training signal handlers."""

        from training import signals  # noqa: F401
