"""Views for the dashboard, training log, race manager and track settings."""

from __future__ import annotations

from datetime import date

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import login as auth_login
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import AuthenticationForm, UserCreationForm
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_POST

from analysis.weeks import parse_calendar_date
from core.coaching import generate_coaching_note
from core.forms import CsvImportForm, RaceFilterForm, RaceForm, RunEntryForm, TrackForm
from core.services import (
    day_detail as build_day_detail,
    import_records_csv,
    log_run,
    race_roster,
    resolve_track,
    track_dashboard,
)
from training.models import Athlete
from training.repository import InvalidRunError, TrainingRecordNotFound, TrainingRepository, track_input


def _request_repository(request: HttpRequest) -> TrainingRepository:
    """Return a repository scoped to the authenticated user's Athlete."""

    athlete, created = Athlete.objects.get_or_create(
        user=request.user,
        defaults={"display_name": request.user.get_username()},
    )
    repository = TrainingRepository(athlete)
    if created:
        repository.seed_default_tracks()
    return repository


def _parse_int(value: str | None) -> int | None:
    """Parse an optional integer query/form value."""

    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _track_url(name: str, track_id: int | None) -> str:
    """Return a URL for `name`, preserving the selected track."""

    target = reverse(name)
    return f"{target}?track={track_id}" if track_id is not None else target


def login_view(request: HttpRequest) -> HttpResponse:
    """Render a combined sign-in + account creation page."""

    if request.user.is_authenticated:
        return redirect(settings.LOGIN_REDIRECT_URL)

    next_url = request.GET.get("next", "")
    login_form = AuthenticationForm(request)
    signup_form = UserCreationForm()

    if request.method == "POST":
        next_url = request.POST.get("next", next_url)
        if "signup_submit" in request.POST:
            signup_form = UserCreationForm(request.POST)
            if signup_form.is_valid():
                user = signup_form.save()
                auth_login(request, user)
                return redirect(settings.LOGIN_REDIRECT_URL)
        else:
            login_form = AuthenticationForm(request, data=request.POST)
            if login_form.is_valid():
                auth_login(request, login_form.get_user())
                if next_url.startswith("/") and not next_url.startswith("//"):
                    return redirect(next_url)
                return redirect(settings.LOGIN_REDIRECT_URL)

    return render(
        request,
        "registration/login.html",
        {"login_form": login_form, "signup_form": signup_form, "next": next_url},
    )


@login_required
def dashboard(request: HttpRequest) -> HttpResponse:
    """Render daily statistics, weekly trend and upcoming races for one track."""

    repository = _request_repository(request)
    try:
        board = track_dashboard(repository, track_id=_parse_int(request.GET.get("track")))
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc
    return render(request, "core/dashboard.html", {"board": board, "coaching_note": None})


@login_required
@require_POST
def coaching_note(request: HttpRequest) -> HttpResponse:
    """Generate a coaching note for the selected track and show it on the dashboard."""

    repository = _request_repository(request)
    try:
        board = track_dashboard(repository, track_id=_parse_int(request.POST.get("track")))
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc

    note = None
    if board.track is not None:
        note = generate_coaching_note(track_input(board.track), board.statistics.daily_stats)
    return render(request, "core/dashboard.html", {"board": board, "coaching_note": note})


@login_required
def day_detail(request: HttpRequest, day: str) -> HttpResponse:
    """Render the individual runs of one day on one track."""

    repository = _request_repository(request)
    try:
        parsed_day = date.fromisoformat(day)
    except ValueError as exc:
        raise Http404("Invalid date.") from exc

    try:
        track = resolve_track(repository, _parse_int(request.GET.get("track")))
        if track is None:
            raise Http404("No track selected.")
        detail = build_day_detail(repository, track_id=track.pk, day=parsed_day)
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc
    return render(request, "core/day_detail.html", {"detail": detail})


@login_required
def training_log(request: HttpRequest) -> HttpResponse:
    """Log single runs (continuous entry) and import runs from CSV."""

    repository = _request_repository(request)
    athlete = repository.athlete
    today = timezone.localdate()
    try:
        selected = resolve_track(repository, _parse_int(request.GET.get("track")))
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc

    entry_form = RunEntryForm(athlete=athlete, today=today, initial_track=selected)
    import_form = CsvImportForm(athlete=athlete, today=today, initial_track=selected)

    if request.method == "POST":
        if "import_submit" in request.POST:
            import_form = CsvImportForm(
                request.POST, request.FILES, athlete=athlete, today=today, initial_track=selected
            )
            if import_form.is_valid():
                track = import_form.cleaned_data["track"]
                result = import_records_csv(
                    repository,
                    track_id=track.pk,
                    text=import_form.cleaned_data["csv_file"],
                    default_date=import_form.cleaned_data["date"],
                )
                if result.imported:
                    messages.success(request, f"Imported {result.imported} run(s) into {track.name}.")
                else:
                    messages.error(
                        request,
                        "Import failed; check the format. Expected YYYY-MM-DD,seconds or seconds only.",
                    )
                if result.skipped_lines:
                    skipped = ", ".join(str(line) for line in result.skipped_lines[:10])
                    messages.warning(request, f"Skipped line(s): {skipped}.")
                return redirect(_track_url("core:training_log", track.pk))
        else:
            entry_form = RunEntryForm(request.POST, athlete=athlete, today=today, initial_track=selected)
            if entry_form.is_valid():
                track = entry_form.cleaned_data["track"]
                try:
                    log_run(
                        repository,
                        track_id=track.pk,
                        day=entry_form.cleaned_data["date"],
                        seconds=entry_form.cleaned_data["seconds"],
                    )
                except InvalidRunError as exc:
                    entry_form.add_error("seconds", str(exc))
                else:
                    messages.success(request, f"Saved {entry_form.cleaned_data['seconds']}s on {track.name}.")
                    target = _track_url("core:training_log", track.pk)
                    return redirect(f"{target}&date={entry_form.cleaned_data['date'].isoformat()}")

    requested_date = parse_calendar_date(request.GET.get("date"))
    if request.method == "GET" and requested_date is not None:
        entry_form.initial["date"] = requested_date

    recent = repository.recent_records(track_id=selected.pk if selected else None)
    return render(
        request,
        "core/training_log.html",
        {
            "entry_form": entry_form,
            "import_form": import_form,
            "selected_track": selected,
            "recent_records": recent,
        },
    )


@login_required
@require_POST
def delete_run(request: HttpRequest, run_id: int) -> HttpResponse:
    """Delete one run and return to the training log."""

    repository = _request_repository(request)
    try:
        repository.delete_run(run_id)
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc
    messages.success(request, "Run deleted.")
    return redirect(_track_url("core:training_log", _parse_int(request.POST.get("track"))))


@login_required
def race_manager(request: HttpRequest) -> HttpResponse:
    """List races (searchable, filterable) and create new ones."""

    repository = _request_repository(request)
    races = repository.list_races()
    categories = sorted({race.category for race in races})
    filter_form = RaceFilterForm(request.GET or None, categories=categories)
    search = ""
    category = ""
    if filter_form.is_bound and filter_form.is_valid():
        search = filter_form.cleaned_data.get("q") or ""
        category = filter_form.cleaned_data.get("category") or ""

    race_form = RaceForm()
    if request.method == "POST":
        race_form = RaceForm(request.POST, request.FILES)
        if race_form.is_valid():
            data = race_form.cleaned_data
            repository.save_race(
                name=data["name"],
                category=data["category"],
                day=data["date"],
                rank=data["rank"],
                notes=data["notes"],
                photo=data["photo"],
            )
            messages.success(request, f"Saved race {data['name']}.")
            return redirect("core:race_manager")

    today = timezone.localdate()
    return render(
        request,
        "core/race_manager.html",
        {
            "races": race_roster(races, today=today, search=search, category=category),
            "today": today,
            "filter_form": filter_form,
            "race_form": race_form,
        },
    )


@login_required
def race_edit(request: HttpRequest, race_id: int) -> HttpResponse:
    """Edit an existing race, including its result and photo."""

    repository = _request_repository(request)
    try:
        race = repository.get_race(race_id)
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc

    if request.method == "POST":
        form = RaceForm(request.POST, request.FILES)
        if form.is_valid():
            data = form.cleaned_data
            repository.save_race(
                race_id=race.pk,
                name=data["name"],
                category=data["category"],
                day=data["date"],
                rank=data["rank"],
                notes=data["notes"],
                photo=data["photo"],
                clear_photo=data["clear_photo"],
            )
            messages.success(request, f"Updated race {data['name']}.")
            return redirect("core:race_manager")
    else:
        form = RaceForm(
            initial={
                "name": race.name,
                "date": race.date,
                "category": race.category,
                "rank": race.rank,
                "notes": race.notes,
            }
        )
    return render(request, "core/race_form.html", {"form": form, "race": race})


@login_required
@require_POST
def delete_race(request: HttpRequest, race_id: int) -> HttpResponse:
    """Delete a race."""

    repository = _request_repository(request)
    try:
        repository.delete_race(race_id)
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc
    messages.success(request, "Race deleted.")
    return redirect("core:race_manager")


@login_required
def race_photo(request: HttpRequest, race_id: int) -> HttpResponse:
    """Serve a race's stored JPEG thumbnail."""

    repository = _request_repository(request)
    try:
        race = repository.get_race(race_id)
    except TrainingRecordNotFound as exc:
        raise Http404(str(exc)) from exc
    if not race.has_photo:
        raise Http404("Race has no photo.")
    return HttpResponse(bytes(race.photo), content_type="image/jpeg")


@login_required
def track_settings(request: HttpRequest) -> HttpResponse:
    """Add, rename, delete and prefer tracks; clear all data."""

    repository = _request_repository(request)
    athlete = repository.athlete
    add_form = TrackForm(athlete=athlete)

    if request.method == "POST":
        action = request.POST.get("action", "")
        track_id = _parse_int(request.POST.get("track"))
        try:
            if action == "add":
                add_form = TrackForm(request.POST, athlete=athlete)
                if add_form.is_valid():
                    track = repository.save_track(
                        name=add_form.cleaned_data["name"],
                        distance_meters=add_form.cleaned_data["distance_meters"],
                    )
                    messages.success(request, f"Added track {track.name}.")
                    return redirect("core:track_settings")
            elif action == "rename" and track_id is not None:
                track = repository.get_track(track_id)
                rename_form = TrackForm(request.POST, athlete=athlete, track=track)
                if rename_form.is_valid():
                    repository.save_track(
                        track_id=track.pk,
                        name=rename_form.cleaned_data["name"],
                        distance_meters=rename_form.cleaned_data["distance_meters"],
                    )
                    messages.success(request, "Track updated.")
                else:
                    messages.error(request, " ".join(rename_form.errors.get("name", ["Invalid track."])))
                return redirect("core:track_settings")
            elif action == "delete" and track_id is not None:
                repository.delete_track(track_id)
                messages.success(request, "Track deleted.")
                return redirect("core:track_settings")
            elif action == "prefer" and track_id is not None:
                track = repository.set_preferred_track(track_id)
                messages.success(request, f"{track.name} is now the default track.")
                return redirect("core:track_settings")
            elif action == "clear":
                repository.clear_all()
                messages.success(request, "All data cleared.")
                return redirect("core:track_settings")
            else:
                messages.error(request, "Unknown action.")
                return redirect("core:track_settings")
        except TrainingRecordNotFound as exc:
            raise Http404(str(exc)) from exc

    return render(
        request,
        "core/track_settings.html",
        {
            "tracks": repository.list_tracks(),
            "preferred_track": repository.get_preferred_track(),
            "add_form": add_form,
        },
    )
