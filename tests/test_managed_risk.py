"""
Tests for Managed-Risk Calculator — caps, floors, and rank preservation.
"""

import random

import pytest

from hrdd.config import settings
from hrdd.core.effectiveness import detection_effectiveness, response_effectiveness
from hrdd.core.managed_risk import (
    UnitRiskState,
    country_focus_multiplier,
    effectiveness_cap,
    managed_risk,
    preserve_rank,
)
from hrdd.models.allocation_models import StrategyConfig
from hrdd.models.unit_models import PortfolioEntry


def _state(code, baseline, managed):
    return UnitRiskState(
        code=code,
        volume=1.0,
        baseline=baseline,
        managed=managed,
        floor=baseline * settings.managed_risk_floor,
    )


def _assert_rank_preserved(units):
    for a in units:
        for b in units:
            if a.baseline_risk > b.baseline_risk:
                assert a.managed_risk > b.managed_risk, (a.code, b.code)


def test_effectiveness_cap_falls_with_risk():
    assert effectiveness_cap(0) == pytest.approx(0.70)
    assert effectiveness_cap(50) == pytest.approx(0.60)
    assert effectiveness_cap(100) == pytest.approx(0.50)


def test_zero_focus_multiplier_is_neutral():
    assert country_focus_multiplier(90, 40, 0.0, 1.0) == pytest.approx(1.0)
    assert country_focus_multiplier(10, 40, 0.0, 1.0) == pytest.approx(1.0)


def test_high_risk_bonus_at_high_focus():
    multiplier = country_focus_multiplier(70, 40, 0.8, 1.3)
    assert multiplier == pytest.approx(1.3 * settings.high_risk_focus_bonus)


def test_zero_focus_differences_come_from_baseline_only(sample_entries, default_strategy):
    """At focus 0 every unit sees the same detection and response."""
    strategy = default_strategy.model_copy(update={"focus": 0.0})
    result = managed_risk(sample_entries, strategy)

    detection = detection_effectiveness(strategy.tool_coverage, strategy.tool_effectiveness)
    response = response_effectiveness(strategy.response_allocation, strategy.response_effectiveness)
    for unit in result.units:
        assert unit.focus_multiplier == pytest.approx(1.0)
        assert unit.detection_effectiveness == pytest.approx(detection)
        applied = min(detection * response, effectiveness_cap(unit.baseline_risk))
        assert unit.managed_risk == pytest.approx(unit.baseline_risk * (1 - applied))
    assert result.rank_corrections == 0


def test_floor_and_bounds(sample_entries, strong_strategy):
    result = managed_risk(sample_entries, strong_strategy)
    for unit in result.units:
        assert unit.managed_risk >= unit.baseline_risk * settings.managed_risk_floor - 1e-9
        assert unit.managed_risk <= unit.baseline_risk + 1e-9
    assert 0 <= result.managed_risk <= result.baseline_risk


def test_rank_fix_is_transitive_with_ties():
    states = [
        _state("A", 80, 30),
        _state("B", 60, 35),
        _state("C", 60, 25),
        _state("D", 40, 40),
    ]
    corrections = preserve_rank(states)
    by_code = {s.code: s for s in states}

    assert corrections == 2
    assert by_code["B"].managed == pytest.approx(30 - settings.rank_epsilon)
    assert by_code["C"].managed == 25
    assert by_code["D"].managed == pytest.approx(25 - settings.rank_epsilon)
    assert by_code["D"].managed < by_code["A"].managed


def test_rank_fix_checks_non_adjacent_units():
    states = [_state("A", 90, 50), _state("B", 80, 20), _state("C", 70, 30)]
    preserve_rank(states)
    a, b, c = states
    assert a.managed > b.managed > c.managed
    assert c.rank_adjusted


def test_rank_fix_respects_floor():
    states = [_state("A", 50, 12.5), _state("B", 49, 20)]
    preserve_rank(states)
    assert states[1].managed == pytest.approx(49 * settings.managed_risk_floor)
    assert states[1].managed < states[0].managed


def test_rank_preserved_on_random_portfolios():
    rng = random.Random(2024)
    for _ in range(40):
        n = rng.randint(3, 12)
        entries = [
            PortfolioEntry(
                code=f"U{i:02d}",
                volume=rng.uniform(1, 50),
                # Coarse grid so ties are common
                risk=float(rng.choice(range(5, 101, 5))),
            )
            for i in range(n)
        ]
        strategy = StrategyConfig(
            tool_coverage=[rng.uniform(0, 100) for _ in range(6)],
            tool_effectiveness=[rng.uniform(0, 100) for _ in range(6)],
            response_allocation=[rng.uniform(0, 100) for _ in range(6)],
            response_effectiveness=[rng.uniform(0, 100) for _ in range(6)],
            focus=rng.choice([0.0, 0.3, 0.6, 0.8, 1.0]),
        )
        result = managed_risk(entries, strategy)
        _assert_rank_preserved(result.units)


@pytest.mark.parametrize("focus", [0.0, 0.25, 0.5, 0.75, 1.0])
def test_rank_preserved_across_focus(sample_entries, strong_strategy, focus):
    strategy = strong_strategy.model_copy(update={"focus": focus})
    result = managed_risk(sample_entries, strategy)
    _assert_rank_preserved(result.units)


def test_zero_risk_unit_stays_zero(default_strategy):
    entries = [PortfolioEntry(code="A", volume=10, risk=0), PortfolioEntry(code="B", volume=10, risk=50)]
    result = managed_risk(entries, default_strategy)
    assert result.units[0].managed_risk == 0


def test_empty_portfolio(default_strategy):
    result = managed_risk([], default_strategy)
    assert result.baseline_risk == 0
    assert result.managed_risk == 0
    assert result.units == []


def test_managed_risk_is_idempotent(sample_entries, strong_strategy):
    first = managed_risk(sample_entries, strong_strategy)
    second = managed_risk(sample_entries, strong_strategy)
    assert first.model_dump() == second.model_dump()


def test_more_coverage_does_not_raise_risk(sample_entries, default_strategy):
    weaker = managed_risk(sample_entries, default_strategy)
    stronger_coverage = [min(100, v + 20) for v in default_strategy.tool_coverage]
    stronger = managed_risk(
        sample_entries,
        default_strategy.model_copy(update={"tool_coverage": stronger_coverage}),
    )
    assert stronger.managed_risk <= weaker.managed_risk + 1e-9
