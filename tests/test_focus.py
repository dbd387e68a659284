"""
Tests for Focus Bias — exponent shape, bounds, and monotonicity.
"""

import pytest

from hrdd.config import settings
from hrdd.core.focus import (
    biased_ratio,
    clamp_focus,
    focus_exponent,
    portfolio_focus_multiplier,
)

FOCUS_GRID = [i / 100 for i in range(101)]


def test_exponent_anchor_points():
    assert focus_exponent(0.0) == pytest.approx(1.0)
    assert focus_exponent(0.5) == pytest.approx(1.6)
    assert focus_exponent(1.0) == pytest.approx(2.0)


def test_exponent_rises_faster_below_midpoint():
    low_slope = focus_exponent(0.5) - focus_exponent(0.0)
    high_slope = focus_exponent(1.0) - focus_exponent(0.5)
    assert low_slope > high_slope


def test_clamp_focus():
    assert clamp_focus(-1) == 0.0
    assert clamp_focus(3) == 1.0
    assert clamp_focus(float("nan")) == 0.0


def test_ratio_is_clamped():
    assert biased_ratio(100, 0.5) == biased_ratio(settings.focus_max_ratio, 0.5)
    assert biased_ratio(0.0001, 0.5) == biased_ratio(settings.focus_min_ratio, 0.5)


def test_zero_focus_is_identity_above_pivot():
    for ratio in (0.8, 1.0, 1.7, 2.5):
        assert biased_ratio(ratio, 0.0) == pytest.approx(ratio)


def test_continuous_at_pivot():
    pivot = settings.low_ratio_pivot
    for focus in (0.2, 0.6, 1.0):
        below = biased_ratio(pivot - 1e-9, focus)
        at = biased_ratio(pivot, focus)
        assert below == pytest.approx(at, rel=1e-6)


@pytest.mark.parametrize("focus", [0.0, 0.3, 0.5, 0.7, 0.71, 0.85, 1.0])
def test_non_decreasing_in_ratio(focus):
    ratios = [i / 100 for i in range(1, 401)]
    values = [biased_ratio(r, focus) for r in ratios]
    for previous, current in zip(values, values[1:]):
        assert current >= previous - 1e-12


@pytest.mark.parametrize("ratio", [1.01, 1.2, 1.5, 2.0, 2.5, 4.0])
def test_non_decreasing_in_focus_above_one(ratio):
    values = [biased_ratio(ratio, f) for f in FOCUS_GRID]
    for previous, current in zip(values, values[1:]):
        assert current >= previous - 1e-12


def test_extreme_ratios_are_compressed_at_high_focus():
    uncompressed = settings.focus_max_ratio ** focus_exponent(1.0)
    assert biased_ratio(settings.focus_max_ratio, 1.0) < uncompressed


def test_portfolio_focus_multiplier():
    assert portfolio_focus_multiplier(0.0, 3.0) == pytest.approx(1.0)
    assert portfolio_focus_multiplier(1.0, 3.0) == pytest.approx(3.0)
    assert portfolio_focus_multiplier(0.5, 2.0) == pytest.approx(1.5)
    # K below 1 is treated as 1
    assert portfolio_focus_multiplier(0.5, 0.2) == pytest.approx(1.0)
