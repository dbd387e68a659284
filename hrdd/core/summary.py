"""
Risk Summary — Bands, strategy breakdown, and baseline-vs-managed summary.
"""

from __future__ import annotations

from hrdd.core.effectiveness import (
    detection_effectiveness,
    primary_response_method,
    response_effectiveness,
    tool_contributions,
)
from hrdd.core.focus import clamp_focus, portfolio_focus_multiplier
from hrdd.core.managed_risk import risk_reduction
from hrdd.models.allocation_models import StrategyConfig
from hrdd.models.risk_models import (
    FocusSummary,
    ManagedRiskResult,
    RiskImprovement,
    RiskSummary,
    ScoredRisk,
    StrategyBreakdown,
)

# (name, lower bound inclusive); upper bound is the next band's lower bound
RISK_BANDS: list[tuple[str, float]] = [
    ("Low", 0.0),
    ("Medium", 20.0),
    ("Medium High", 40.0),
    ("High", 60.0),
    ("Very High", 80.0),
]


def risk_band(score: float) -> str:
    """Band name for a 0-100 score; 'Unknown' outside that range."""
    if score is None or score < 0 or score > 100:
        return "Unknown"
    band = RISK_BANDS[0][0]
    for name, lower in RISK_BANDS:
        if score >= lower:
            band = name
    return band


def strategy_breakdown(
    strategy: StrategyConfig,
    concentration: float = 1.0,
) -> StrategyBreakdown:
    focus = clamp_focus(strategy.focus)
    return StrategyBreakdown(
        tools=tool_contributions(strategy.tool_coverage, strategy.tool_effectiveness),
        overall_detection=detection_effectiveness(
            strategy.tool_coverage, strategy.tool_effectiveness
        ),
        overall_response=response_effectiveness(
            strategy.response_allocation, strategy.response_effectiveness
        ),
        primary_response=primary_response_method(
            strategy.response_allocation, strategy.response_effectiveness
        ),
        focus=FocusSummary(
            level=focus,
            concentration=max(1.0, concentration),
            portfolio_multiplier=portfolio_focus_multiplier(focus, concentration),
        ),
    )


def risk_summary(result: ManagedRiskResult, strategy: StrategyConfig) -> RiskSummary:
    """Summarize a managed-risk result for reporting layers."""
    baseline = result.baseline_risk
    managed = result.managed_risk
    return RiskSummary(
        baseline=ScoredRisk(score=baseline, band=risk_band(baseline)),
        managed=ScoredRisk(score=managed, band=risk_band(managed)),
        improvement=RiskImprovement(
            risk_reduction=risk_reduction(baseline, managed),
            absolute_reduction=baseline - managed,
            is_improvement=managed < baseline,
        ),
        units_selected=len(result.units),
        concentration=result.concentration,
        strategy=strategy_breakdown(strategy, result.concentration),
    )
