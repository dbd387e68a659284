"""
Tests for Risk Scorer — weighted score over known indicators.
"""

import pytest

from hrdd.core.scorer import score, score_indicators, score_units
from hrdd.models.unit_models import DEFAULT_WEIGHTS, Unit


def test_zero_indicators_are_excluded():
    value = score_indicators([50, 40, 0, 60, 20], [30, 30, 10, 20, 10])
    assert value == pytest.approx(4100 / 90)


def test_all_zero_indicators_score_zero():
    assert score_indicators([0, 0, 0, 0, 0], DEFAULT_WEIGHTS) == 0.0


@pytest.mark.parametrize("weights", [
    [20, 20, 5, 10, 10],
    [50, 0, 0, 0, 1],
    [1, 1, 1, 1, 1],
])
def test_equal_indicators_score_that_value(weights):
    """The score is a weighted mean, so equal inputs reproduce the input."""
    assert score_indicators([42, 42, 42, 42, 42], weights) == pytest.approx(42)


def test_score_stays_in_bounds():
    assert 0 <= score_indicators([100, 100, 100, 100, 100], DEFAULT_WEIGHTS) <= 100
    assert score_indicators([500, 500, 500, 500, 500], DEFAULT_WEIGHTS) == 100


@pytest.mark.parametrize("weights", [
    [20, 20, 5, 10],
    [20, 20, 5, 10, 60],
    [20, -1, 5, 10, 10],
    [20, float("nan"), 5, 10, 10],
])
def test_invalid_weights_score_zero(weights):
    assert score_indicators([50, 40, 30, 60, 20], weights) == 0.0


def test_zero_weight_on_only_known_indicator():
    assert score_indicators([0, 0, 0, 0, 80], [20, 20, 5, 10, 0]) == 0.0


def test_score_is_pure(sample_units):
    unit = sample_units[0]
    assert score(unit) == score(unit)
    assert score(unit, DEFAULT_WEIGHTS) == score_indicators(unit.indicators, DEFAULT_WEIGHTS)


def test_score_units_keyed_by_code(sample_units):
    scores = score_units(sample_units)
    assert set(scores) == {"AAA", "BBB", "CCC", "DDD", "EEE"}
    assert scores["AAA"] > scores["BBB"] > scores["DDD"] > scores["EEE"]


def test_missing_indicator_does_not_pull_score_down():
    with_gap = Unit(code="X", indicators=(40, 0, 40, 40, 40))
    assert score(with_gap) == pytest.approx(40)
