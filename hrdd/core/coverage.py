"""
Coverage Distributor — Spread baseline tool coverage across units by focus.

Per unit:
    adjustment = (1 − focus) + focus × biased_ratio
    boost      = 1 + boost_max × focus_phase × risk_phase
    coverage   = min(100, base × adjustment × boost)

Then, per tool, total usage Σ(coverage × volume) is scaled back whenever it
exceeds (1 + expansion_cap) × the original usage.
"""

from __future__ import annotations

from typing import Sequence

from hrdd.config import settings
from hrdd.core.focus import biased_ratio, clamp_focus
from hrdd.core.validation import is_valid_tool_vector
from hrdd.models.allocation_models import TOOL_COUNT, CoverageDistribution
from hrdd.models.unit_models import PortfolioEntry


def _phase(value: float, start: float, span: float) -> float:
    """Linear 0→1 ramp starting at ``start`` over ``span``."""
    if span <= 0:
        return 1.0 if value > start else 0.0
    return max(0.0, min(1.0, (value - start) / span))


def high_risk_boost(risk: float, focus: float) -> float:
    """Bounded extra boost for high-risk units, phased in smoothly."""
    focus_phase = _phase(
        clamp_focus(focus),
        settings.high_risk_boost_focus_start,
        settings.high_risk_boost_focus_span,
    )
    risk_phase = _phase(
        risk, settings.high_risk_threshold, settings.high_risk_boost_risk_span
    )
    return 1.0 + settings.high_risk_boost_max * focus_phase * risk_phase


def unit_adjustment(risk: float, baseline_risk: float, focus: float) -> float:
    """Coverage multiplier for one unit before resource conservation."""
    f = clamp_focus(focus)
    if baseline_risk <= 0:
        return 1.0
    ratio = risk / baseline_risk
    adjustment = (1.0 - f) + f * biased_ratio(ratio, f)
    return adjustment * high_risk_boost(risk, f)


def distribute_coverage_values(
    entries: Sequence[PortfolioEntry],
    base_coverage: Sequence[float],
    focus: float,
    baseline_risk: float,
) -> tuple[list[list[float]], list[float], list[float]]:
    """
    Distribute coverage without building result models.

    Returns:
        (per-unit coverage rows in entry order, per-unit multipliers,
        per-tool conservation factors)
    """
    if not is_valid_tool_vector(base_coverage):
        rows = [[0.0] * TOOL_COUNT for _ in entries]
        return rows, [1.0] * len(entries), [1.0] * TOOL_COUNT

    multipliers = [unit_adjustment(e.risk, baseline_risk, focus) for e in entries]
    rows = [
        [min(100.0, base * m) for base in base_coverage]
        for m in multipliers
    ]

    total_volume = sum(e.volume for e in entries)
    factors = [1.0] * TOOL_COUNT
    for t in range(TOOL_COUNT):
        original = base_coverage[t] * total_volume
        actual = sum(row[t] * e.volume for row, e in zip(rows, entries))
        allowed = original * (1.0 + settings.coverage_expansion_cap)
        if actual > allowed and actual > 0:
            factor = allowed / actual
            factors[t] = factor
            for row in rows:
                row[t] *= factor

    return rows, multipliers, factors


def distribute_coverage(
    entries: Sequence[PortfolioEntry],
    base_coverage: Sequence[float],
    focus: float,
    baseline_risk: float,
) -> CoverageDistribution:
    """
    Redistribute baseline tool coverage across the portfolio by focus.

    Invalid coverage vectors yield zero coverage for every unit.
    """
    rows, multipliers, factors = distribute_coverage_values(
        entries, base_coverage, focus, baseline_risk
    )
    return CoverageDistribution(
        coverage={e.code: row for e, row in zip(entries, rows)},
        adjustments={e.code: m for e, m in zip(entries, multipliers)},
        conservation_factors=factors,
    )
