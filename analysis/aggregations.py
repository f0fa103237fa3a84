"""Aggregation helpers for the Analysis Engine.

This module provides deterministic numeric reductions used by the daily and
weekly views without introducing Django dependencies.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

MIN_RUNS_FOR_STABILITY = 3
CV_PENALTY = 500.0


def mean(values: Sequence[float]) -> float:
    """Compute the arithmetic mean of a non-empty sequence.

    Args:
        values: Numeric values.

    Returns:
        The mean, or 0.0 when `values` is empty.
    """

    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std_dev(values: Sequence[float]) -> float:
    """Compute the population standard deviation (divide by N).

    Args:
        values: Numeric values.

    Returns:
        Standard deviation, or 0.0 when fewer than two values exist.
    """

    if len(values) < 2:
        return 0.0
    center = mean(values)
    variance = sum((value - center) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def coefficient_of_variation(std_dev: float, average: float) -> float:
    """Return `std_dev / average`, or 0.0 when the average is 0."""

    if average == 0:
        return 0.0
    return std_dev / average


def stability_score(*, std_dev: float, average: float, count: int) -> float:
    """Score run-to-run consistency on a 0-100 scale.

    The score falls linearly with the coefficient of variation: 2% spread
    scores 90, 10% scores 50, and 20% or more floors at 0.

    Args:
        std_dev: Population standard deviation of the group's times.
        average: Mean of the group's times.
        count: Number of runs in the group.

    Returns:
        The stability score. Groups with fewer than three runs score 0.
    """

    if count < MIN_RUNS_FOR_STABILITY:
        return 0.0
    cv = coefficient_of_variation(std_dev, average)
    # Negative averages only come from invalid input; keep the range closed.
    return min(100.0, max(0.0, 100.0 - cv * CV_PENALTY))
