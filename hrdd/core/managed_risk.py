"""
Managed-Risk Calculator — Rank-preserving managed risk per unit and portfolio.

Stage 1 (local, per unit):
    raw      = detection(unit coverage) × response × country focus multiplier
    applied  = min(raw, cap(risk))        cap falls from 70% to 50% with risk
    managed  = max(floor, risk × (1 − applied))   floor = 25% of risk

Stage 2 (global): walk units by descending baseline risk and push down any
unit whose managed risk is not below every strictly-higher-baseline unit.
The local multipliers are individually bounded but do not guarantee a
monotone mapping from baseline rank to managed rank on their own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from hrdd.config import settings
from hrdd.core.coverage import distribute_coverage_values
from hrdd.core.effectiveness import detection_effectiveness, response_effectiveness
from hrdd.core.focus import biased_ratio, clamp_focus, portfolio_focus_multiplier
from hrdd.core.portfolio import aggregate_entries
from hrdd.models.allocation_models import StrategyConfig
from hrdd.models.risk_models import ManagedRiskResult, UnitManagedRisk
from hrdd.models.unit_models import PortfolioEntry, PortfolioMetrics


@dataclass
class UnitRiskState:
    """Mutable working row for one unit during the calculation."""

    code: str
    volume: float
    baseline: float
    managed: float
    floor: float
    detection: float = 0.0
    focus_multiplier: float = 1.0
    raw_reduction: float = 0.0
    applied_reduction: float = 0.0
    cap: float = 0.0
    rank_adjusted: bool = False


def effectiveness_cap(risk: float) -> float:
    """Progressive reduction cap, decreasing linearly as baseline risk rises."""
    low = settings.effectiveness_cap_low_risk
    high = settings.effectiveness_cap_high_risk
    position = max(0.0, min(1.0, risk / 100.0))
    return low - (low - high) * position


def country_focus_multiplier(
    risk: float,
    baseline_risk: float,
    focus: float,
    portfolio_multiplier: float,
) -> float:
    """Focus multiplier for a single unit."""
    f = clamp_focus(focus)
    if f > settings.high_risk_focus_threshold and risk >= settings.high_risk_threshold:
        return portfolio_multiplier * settings.high_risk_focus_bonus

    ratio = risk / baseline_risk if baseline_risk > 0 else 1.0
    gamma = settings.focus_concentration_sensitivity
    return (1.0 - f * gamma) + f * gamma * biased_ratio(ratio, f)


def preserve_rank(states: Sequence[UnitRiskState]) -> int:
    """
    Enforce managed-risk ordering consistent with baseline ordering.

    Units are grouped by equal baseline risk. A unit whose managed risk is at
    or above the lowest managed risk of all strictly-higher-baseline units is
    lowered to max(floor, ceiling − ε). Comparing against that running
    minimum rather than only the adjacent unit keeps the result transitive.

    Returns:
        Number of units corrected.
    """
    ordered = sorted(states, key=lambda s: (-s.baseline, s.code))
    epsilon = settings.rank_epsilon
    ceiling = math.inf
    corrections = 0

    i = 0
    while i < len(ordered):
        j = i
        while j < len(ordered) and ordered[j].baseline == ordered[i].baseline:
            j += 1
        group = ordered[i:j]

        if ceiling != math.inf:
            for state in group:
                if state.managed >= ceiling:
                    state.managed = max(state.floor, ceiling - epsilon)
                    state.rank_adjusted = True
                    corrections += 1

        ceiling = min(ceiling, min(s.managed for s in group))
        i = j

    return corrections


def compute_unit_states(
    entries: Sequence[PortfolioEntry],
    tool_coverage: Sequence[float],
    tool_effectiveness: Sequence[float],
    response_allocation: Sequence[float],
    response_eff: Sequence[float],
    focus: float,
    metrics: PortfolioMetrics | None = None,
) -> tuple[list[UnitRiskState], PortfolioMetrics, float]:
    """
    Run both stages and return the per-unit states.

    Returns:
        (states in entry order, portfolio metrics, response effectiveness)
    """
    f = clamp_focus(focus)
    metrics = metrics or aggregate_entries(entries)
    baseline = metrics.baseline_risk
    response = response_effectiveness(response_allocation, response_eff)
    portfolio_multiplier = portfolio_focus_multiplier(f, metrics.concentration)

    rows, _, _ = distribute_coverage_values(entries, tool_coverage, f, baseline)

    states: list[UnitRiskState] = []
    for entry, row in zip(entries, rows):
        risk = entry.risk
        if risk <= 0:
            states.append(
                UnitRiskState(code=entry.code, volume=entry.volume, baseline=0.0, managed=0.0, floor=0.0)
            )
            continue

        detection = detection_effectiveness(row, tool_effectiveness)
        multiplier = country_focus_multiplier(risk, baseline, f, portfolio_multiplier)
        raw = detection * response * multiplier
        cap = effectiveness_cap(risk)
        applied = max(0.0, min(raw, cap))
        floor = risk * settings.managed_risk_floor
        managed = max(floor, risk * (1.0 - applied))

        states.append(
            UnitRiskState(
                code=entry.code,
                volume=entry.volume,
                baseline=risk,
                managed=managed,
                floor=floor,
                detection=detection,
                focus_multiplier=multiplier,
                raw_reduction=raw,
                applied_reduction=applied,
                cap=cap,
            )
        )

    preserve_rank(states)
    return states, metrics, response


def _weighted_managed(states: Sequence[UnitRiskState]) -> float:
    total_volume = sum(s.volume for s in states)
    if total_volume <= 0:
        return 0.0
    return sum(s.volume * s.managed for s in states) / total_volume


def risk_reduction(baseline_risk: float, managed: float) -> float:
    """Percent reduction of managed vs baseline risk (0 for zero baseline)."""
    if baseline_risk <= 0:
        return 0.0
    return (baseline_risk - managed) / baseline_risk * 100.0


def portfolio_managed_risk(
    entries: Sequence[PortfolioEntry],
    tool_coverage: Sequence[float],
    tool_effectiveness: Sequence[float],
    response_allocation: Sequence[float],
    response_eff: Sequence[float],
    focus: float,
    metrics: PortfolioMetrics | None = None,
) -> float:
    """Volume-weighted portfolio managed risk without building result models."""
    if not entries:
        return 0.0
    states, _, _ = compute_unit_states(
        entries,
        tool_coverage,
        tool_effectiveness,
        response_allocation,
        response_eff,
        focus,
        metrics,
    )
    return _weighted_managed(states)


def managed_risk(
    entries: Sequence[PortfolioEntry],
    strategy: StrategyConfig,
) -> ManagedRiskResult:
    """
    Compute rank-preserving managed risk for a portfolio.

    Args:
        entries: Portfolio entries with volumes and baseline risk scores.
        strategy: Tool coverage, response allocation, effectiveness and focus.

    Returns:
        ManagedRiskResult with portfolio figures and per-unit detail.
    """
    focus = clamp_focus(strategy.focus)
    detection = detection_effectiveness(strategy.tool_coverage, strategy.tool_effectiveness)
    if not entries:
        return ManagedRiskResult(
            focus=focus,
            portfolio_focus_multiplier=portfolio_focus_multiplier(focus, 1.0),
            detection_effectiveness=detection,
        )

    states, metrics, response = compute_unit_states(
        entries,
        strategy.tool_coverage,
        strategy.tool_effectiveness,
        strategy.response_allocation,
        strategy.response_effectiveness,
        focus,
    )
    managed = _weighted_managed(states)

    return ManagedRiskResult(
        baseline_risk=metrics.baseline_risk,
        managed_risk=managed,
        risk_reduction=risk_reduction(metrics.baseline_risk, managed),
        concentration=metrics.concentration,
        focus=focus,
        portfolio_focus_multiplier=portfolio_focus_multiplier(focus, metrics.concentration),
        detection_effectiveness=detection,
        response_effectiveness=response,
        combined_effectiveness=detection * response,
        units=[
            UnitManagedRisk(
                code=s.code,
                volume=s.volume,
                baseline_risk=s.baseline,
                managed_risk=s.managed,
                detection_effectiveness=s.detection,
                focus_multiplier=s.focus_multiplier,
                raw_reduction=s.raw_reduction,
                applied_reduction=s.applied_reduction,
                effectiveness_cap=s.cap,
                floor=s.floor,
                rank_adjusted=s.rank_adjusted,
            )
            for s in states
        ],
        rank_corrections=sum(1 for s in states if s.rank_adjusted),
    )
