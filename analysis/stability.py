"""Stability score classification.

Maps a 0-100 stability score to a display label. Boundary scores belong to the
higher tier (inclusive lower bounds).
"""

from __future__ import annotations

from .aggregations import MIN_RUNS_FOR_STABILITY
from .dto import StabilityLabel, StabilityTier

INSUFFICIENT_DATA = StabilityLabel(
    label="Insufficient data",
    tier=StabilityTier.neutral,
    description="Needs more runs",
)

_LADDER: tuple[tuple[float, StabilityLabel], ...] = (
    (90.0, StabilityLabel("Exceptional precision", StabilityTier.best, "Machine-like consistency")),
    (80.0, StabilityLabel("Highly stable", StabilityTier.very_good, "Excellent control")),
    (60.0, StabilityLabel("Solid", StabilityTier.good, "Holding steady")),
    (40.0, StabilityLabel("Some variability", StabilityTier.caution, "Focus needs sharpening")),
)
DIVERGING = StabilityLabel(
    label="Diverging",
    tier=StabilityTier.worst,
    description="Consider adjusting rhythm",
)


def classify_stability(score: float, count: int) -> StabilityLabel:
    """Classify a stability score into a label and severity tier.

    Args:
        score: Stability score on a 0-100 scale.
        count: Number of runs the score was computed from.

    Returns:
        The first matching StabilityLabel; fewer than three runs always yield
        the insufficient-data label.
    """

    if count < MIN_RUNS_FOR_STABILITY:
        return INSUFFICIENT_DATA
    for threshold, label in _LADDER:
        if score >= threshold:
            return label
    return DIVERGING
