"""Tests for stability score labels."""

from __future__ import annotations

import pytest

from analysis import classify_stability
from analysis.dto import StabilityTier

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("score", "label", "tier"),
    [
        (100.0, "Exceptional precision", StabilityTier.best),
        (90.0, "Exceptional precision", StabilityTier.best),
        (89.99, "Highly stable", StabilityTier.very_good),
        (80.0, "Highly stable", StabilityTier.very_good),
        (60.0, "Solid", StabilityTier.good),
        (59.9, "Some variability", StabilityTier.caution),
        (40.0, "Some variability", StabilityTier.caution),
        (39.9, "Diverging", StabilityTier.worst),
        (0.0, "Diverging", StabilityTier.worst),
    ],
)
def test_classify_stability_boundaries_belong_to_higher_tier(score, label, tier) -> None:
    """Thresholds are inclusive lower bounds."""

    result = classify_stability(score, 5)

    assert result.label == label
    assert result.tier == tier


def test_classify_stability_requires_three_runs() -> None:
    """Small samples are labelled as insufficient regardless of score."""

    result = classify_stability(100.0, 2)

    assert result.label == "Insufficient data"
    assert result.tier == StabilityTier.neutral
    assert classify_stability(100.0, 3).tier == StabilityTier.best
