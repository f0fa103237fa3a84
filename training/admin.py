"""Admin registrations for the training app."""

from __future__ import annotations

from django.contrib import admin

from training.models import Athlete, RaceEvent, Track, TrainingRecord


@admin.register(Athlete)
class AthleteAdmin(admin.ModelAdmin):
    """Admin configuration for Athlete."""

    list_display = ("display_name", "user", "preferred_track", "created_at")
    search_fields = ("display_name", "user__username")


@admin.register(Track)
class TrackAdmin(admin.ModelAdmin):
    """Admin configuration for Track."""

    list_display = ("name", "athlete", "distance_meters")
    list_filter = ("athlete",)
    search_fields = ("name",)


@admin.register(TrainingRecord)
class TrainingRecordAdmin(admin.ModelAdmin):
    """Admin configuration for TrainingRecord."""

    list_display = ("date", "track", "seconds", "athlete", "timestamp")
    list_filter = ("athlete", "track")
    date_hierarchy = "date"


@admin.register(RaceEvent)
class RaceEventAdmin(admin.ModelAdmin):
    """Admin configuration for RaceEvent."""

    list_display = ("name", "category", "date", "rank", "athlete")
    list_filter = ("category", "athlete")
    search_fields = ("name", "category")
    exclude = ("photo",)
