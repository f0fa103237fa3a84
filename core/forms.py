"""Forms for core UI workflows.

Forms validate raw user input and are always bound to the requesting athlete,
so choice fields only ever list that athlete's tracks.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django import forms

from core.images import PhotoProcessingError, compress_photo
from training.models import Athlete, Track

MAX_CSV_BYTES = 1024 * 1024


class _AthleteTrackMixin:
    """Restrict a `track` ModelChoiceField to the athlete's tracks."""

    def _bind_tracks(self, athlete: Athlete, *, initial_track: Track | None) -> None:
        field = self.fields["track"]
        field.queryset = Track.objects.filter(athlete=athlete).order_by("created_at", "id")
        if initial_track is not None and not self.is_bound:
            self.initial.setdefault("track", initial_track.pk)


class RunEntryForm(_AthleteTrackMixin, forms.Form):
    """Validate a single timed run."""

    track = forms.ModelChoiceField(queryset=Track.objects.none(), empty_label=None, label="Track")
    date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}), label="Date")
    seconds = forms.DecimalField(
        min_value=Decimal("0.0001"),
        max_digits=9,
        decimal_places=4,
        label="Seconds",
        widget=forms.NumberInput(attrs={"step": "0.0001", "autofocus": True, "inputmode": "decimal"}),
    )

    def __init__(self, *args, athlete: Athlete, today: date, initial_track: Track | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bind_tracks(athlete, initial_track=initial_track)
        if not self.is_bound:
            self.initial.setdefault("date", today)


class CsvImportForm(_AthleteTrackMixin, forms.Form):
    """Validate a CSV upload of `date,seconds` or `seconds` lines."""

    track = forms.ModelChoiceField(queryset=Track.objects.none(), empty_label=None, label="Track")
    date = forms.DateField(
        widget=forms.DateInput(attrs={"type": "date"}),
        label="Default date",
        help_text="Used for lines that only contain seconds.",
    )
    csv_file = forms.FileField(label="CSV file", help_text="Format: YYYY-MM-DD,seconds or seconds only.")

    def __init__(self, *args, athlete: Athlete, today: date, initial_track: Track | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bind_tracks(athlete, initial_track=initial_track)
        if not self.is_bound:
            self.initial.setdefault("date", today)

    def clean_csv_file(self) -> str:
        """Return the upload decoded as UTF-8 text."""

        upload = self.cleaned_data["csv_file"]
        if upload.size > MAX_CSV_BYTES:
            raise forms.ValidationError("CSV file is too large (limit 1 MB).")
        try:
            return upload.read().decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise forms.ValidationError("CSV file must be UTF-8 text.") from exc


class RaceForm(forms.Form):
    """Validate a race create/edit submission."""

    name = forms.CharField(max_length=120, label="Race name")
    date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}), label="Date")
    category = forms.CharField(max_length=80, label="Category", help_text="e.g. Open, Age 4 final")
    rank = forms.CharField(
        max_length=40,
        required=False,
        label="Result",
        help_text="Leave empty for upcoming races; a result marks the race finished.",
    )
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 3}), label="Notes")
    photo = forms.FileField(required=False, label="Photo")
    clear_photo = forms.BooleanField(required=False, label="Remove current photo")

    def clean_photo(self) -> bytes | None:
        """Return the uploaded photo as a compressed JPEG thumbnail."""

        upload = self.cleaned_data.get("photo")
        if not upload:
            return None
        try:
            return compress_photo(upload.read())
        except PhotoProcessingError as exc:
            raise forms.ValidationError(str(exc)) from exc


class RaceFilterForm(forms.Form):
    """Validate race manager search and category filters."""

    q = forms.CharField(required=False, label="Search")
    category = forms.ChoiceField(required=False, label="Category")

    def __init__(self, *args, categories: list[str], **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fields["category"].choices = [("", "All"), *((value, value) for value in categories)]


class TrackForm(forms.Form):
    """Validate a new or renamed track."""

    name = forms.CharField(max_length=80, label="Track name")
    distance_meters = forms.IntegerField(min_value=0, initial=0, required=False, label="Distance (m)")

    def __init__(self, *args, athlete: Athlete, track: Track | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._athlete = athlete
        self._track = track

    def clean_name(self) -> str:
        """Reject names already used by another of the athlete's tracks."""

        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("This field is required.")
        clashes = Track.objects.filter(athlete=self._athlete, name=name)
        if self._track is not None:
            clashes = clashes.exclude(pk=self._track.pk)
        if clashes.exists():
            raise forms.ValidationError("A track with this name already exists.")
        return name

    def clean_distance_meters(self) -> int:
        """Default a blank distance to 0."""

        return self.cleaned_data.get("distance_meters") or 0
