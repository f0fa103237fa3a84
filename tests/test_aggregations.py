"""Tests for numeric reductions and rate conversion."""

from __future__ import annotations

import pytest
from pytest import approx

from analysis.aggregations import coefficient_of_variation, mean, population_std_dev, stability_score
from analysis.rates import speed_kmh

pytestmark = pytest.mark.unit


def test_mean_and_std_dev_of_empty_and_single_values() -> None:
    """Degenerate inputs reduce to 0 instead of raising."""

    assert mean([]) == 0.0
    assert population_std_dev([]) == 0.0
    assert population_std_dev([2.5]) == 0.0


def test_coefficient_of_variation_guards_zero_average() -> None:
    """A zero average short-circuits to 0."""

    assert coefficient_of_variation(1.0, 0.0) == 0.0
    assert coefficient_of_variation(0.1, 2.0) == approx(0.05)


def test_stability_score_clamps_to_closed_range() -> None:
    """Scores never leave [0, 100], even for nonsensical inputs."""

    assert stability_score(std_dev=1.0, average=2.0, count=3) == 0.0
    assert stability_score(std_dev=0.2, average=2.0, count=3) == approx(50.0)
    assert stability_score(std_dev=0.5, average=-2.0, count=3) == 100.0
    assert stability_score(std_dev=0.0, average=2.0, count=2) == 0.0


def test_speed_kmh_converts_and_guards_zero_time() -> None:
    """Distance over time converts to km/h; zero seconds yields 0."""

    assert speed_kmh(30, 5.0) == approx(21.6)
    assert speed_kmh(10, 0) == 0.0
    assert speed_kmh(0, 2.0) == 0.0
