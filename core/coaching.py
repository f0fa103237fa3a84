"""LLM-generated coaching notes for a track's recent statistics.

The note is enrichment, not critical path: every failure degrades to a fixed
fallback message and is logged, never raised into the view.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from google import genai
from google.genai import types as genai_types

from analysis.dto import DayStats, TrackInput

logger = logging.getLogger(__name__)

RECENT_DAYS = 5
COACH_TEMPERATURE = 0.4
COACH_MAX_TOKENS = 600

MISSING_KEY_MESSAGE = "Set GEMINI_API_KEY to enable the AI coaching note."
NOT_ENOUGH_DATA_MESSAGE = "Not enough data to produce an analysis."
UNAVAILABLE_MESSAGE = "The AI coach is temporarily unavailable."

SYSTEM_PROMPT = """You are an elite sprint and track cycling coach.
Write for the athlete and their coach. Be professional and precise.
Keep the whole answer under 150 words. No emoji."""


@dataclass(frozen=True, slots=True)
class CoachingNote:
    """Result of a coaching-note request.

    Attributes:
        text: Note text, or a fallback message.
        ok: True when the text came from the model.
    """

    text: str
    ok: bool


def build_prompt(track: TrackInput, daily_stats: Sequence[DayStats]) -> str:
    """Build the coaching prompt from the most recent days of statistics.

    Args:
        track: Track the statistics belong to.
        daily_stats: Daily statistics, most recent first.

    Returns:
        Prompt text listing up to five recent days.
    """

    lines = [
        f"The athlete is training on \"{track.name}\".",
        "",
        "Recent sessions (most recent first):",
    ]
    for stats in daily_stats[:RECENT_DAYS]:
        lines.append(
            f"- Date: {stats.date}, average: {stats.avg_seconds:.3f}s, "
            f"best: {stats.best_seconds:.3f}s, stability (0-100): {stats.stability_score:.0f}"
        )
    lines.extend(
        [
            "",
            "Analyze:",
            "1. Time trend: are gains flattening out or is there a breakthrough?",
            "2. Stability: how consistent is the output at high intensity?",
            "3. Next phase: one concrete focus for strength or cadence work.",
        ]
    )
    return "\n".join(lines)


def create_client() -> Any | None:
    """Return a configured Gemini client, or None when no API key is set."""

    if not settings.GEMINI_API_KEY:
        return None
    return genai.Client(
        api_key=settings.GEMINI_API_KEY,
        http_options=genai_types.HttpOptions(timeout=settings.GEMINI_TIMEOUT_SECONDS * 1000),
    )


def generate_coaching_note(
    track: TrackInput,
    daily_stats: Sequence[DayStats],
    *,
    client: Any | None = None,
) -> CoachingNote:
    """Ask the model for a short coaching note about recent sessions.

    Args:
        track: Track the statistics belong to.
        daily_stats: Daily statistics, most recent first.
        client: Optional Gemini client; created from settings when omitted.

    Returns:
        CoachingNote with model text, or a fallback message with `ok=False`.
    """

    if client is None:
        client = create_client()
    if client is None:
        return CoachingNote(text=MISSING_KEY_MESSAGE, ok=False)
    if not daily_stats:
        return CoachingNote(text=NOT_ENOUGH_DATA_MESSAGE, ok=False)

    prompt = build_prompt(track, daily_stats)
    try:
        response = client.models.generate_content(
            model=settings.GEMINI_MODEL,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                temperature=COACH_TEMPERATURE,
                max_output_tokens=COACH_MAX_TOKENS,
            ),
        )
    except Exception as exc:
        logger.warning("Coaching note request failed for track %s: %s", track.track_id, exc)
        return CoachingNote(text=UNAVAILABLE_MESSAGE, ok=False)

    text = (getattr(response, "text", None) or "").strip()
    if not text:
        logger.info("Coaching note response for track %s was empty", track.track_id)
        return CoachingNote(text=NOT_ENOUGH_DATA_MESSAGE, ok=False)
    return CoachingNote(text=text, ok=True)
