"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("coach/", views.coaching_note, name="coaching_note"),
    path("days/<str:day>/", views.day_detail, name="day_detail"),
    path("log/", views.training_log, name="training_log"),
    path("log/<int:run_id>/delete/", views.delete_run, name="delete_run"),
    path("races/", views.race_manager, name="race_manager"),
    path("races/<int:race_id>/edit/", views.race_edit, name="race_edit"),
    path("races/<int:race_id>/delete/", views.delete_race, name="delete_race"),
    path("races/<int:race_id>/photo/", views.race_photo, name="race_photo"),
    path("settings/", views.track_settings, name="track_settings"),
]
