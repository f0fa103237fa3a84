"""Template context processors for SprintLog."""

from __future__ import annotations

from django.http import HttpRequest

NAV_ITEMS: tuple[tuple[str, str], ...] = (
    ("dashboard", "Dashboard"),
    ("training_log", "Training log"),
    ("race_manager", "Races"),
    ("track_settings", "Settings"),
)


def navigation(request: HttpRequest) -> dict[str, object]:
    """Expose the navigation entries and the active one to all templates.

    Args:
        request: Current request object.

    Returns:
        Context dict with `nav_items` (url name, label, active) triples.
    """

    match = getattr(request, "resolver_match", None)
    current = match.url_name if match is not None else ""
    return {
        "nav_items": [(f"core:{name}", label, name == current) for name, label in NAV_ITEMS],
    }
