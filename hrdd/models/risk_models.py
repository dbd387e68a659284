"""
Risk Data Models — Managed-risk results and explainable strategy breakdowns.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UnitManagedRisk(BaseModel):
    """How mitigation plays out for a single unit."""

    code: str
    volume: float
    baseline_risk: float
    managed_risk: float
    detection_effectiveness: float
    focus_multiplier: float
    raw_reduction: float = Field(..., description="detection × response × focus multiplier")
    applied_reduction: float = Field(..., description="Reduction after the progressive cap")
    effectiveness_cap: float
    floor: float
    rank_adjusted: bool = Field(
        default=False, description="True if rank preservation lowered managed risk"
    )


class ManagedRiskResult(BaseModel):
    """Portfolio managed risk with per-unit detail."""

    baseline_risk: float = 0.0
    managed_risk: float = 0.0
    risk_reduction: float = Field(default=0.0, description="Percent reduction vs baseline")
    concentration: float = 1.0
    focus: float = 0.0
    portfolio_focus_multiplier: float = 1.0
    detection_effectiveness: float = Field(
        default=0.0, description="Portfolio-level detection from the undistributed coverage"
    )
    response_effectiveness: float = 0.0
    combined_effectiveness: float = 0.0
    units: list[UnitManagedRisk] = Field(default_factory=list)
    rank_corrections: int = 0
    formula: str = Field(
        default="managed = max(floor, risk × (1 − min(cap, detection × response × focus)))",
        description="Human-readable formula used",
    )


class ToolContribution(BaseModel):
    """Explainable contribution of a single detection tool."""

    name: str
    category: str
    coverage: float
    base_effectiveness: float = Field(..., description="Percent")
    user_effectiveness: float = Field(..., description="Percent")
    average_effectiveness: float = Field(..., description="Percent")
    contribution: float = Field(..., description="coverage × average effectiveness")


class PrimaryResponse(BaseModel):
    """Response method carrying the largest allocation."""

    method: str
    weight: float
    effectiveness: float


class FocusSummary(BaseModel):
    level: float
    concentration: float
    portfolio_multiplier: float


class StrategyBreakdown(BaseModel):
    """Per-tool contributions plus aggregate effectiveness."""

    tools: list[ToolContribution] = Field(default_factory=list)
    overall_detection: float = 0.0
    overall_response: float = 0.0
    primary_response: PrimaryResponse
    focus: FocusSummary


class ScoredRisk(BaseModel):
    score: float
    band: str


class RiskImprovement(BaseModel):
    risk_reduction: float
    absolute_reduction: float
    is_improvement: bool


class RiskSummary(BaseModel):
    """Baseline vs managed comparison used by reporting layers."""

    baseline: ScoredRisk
    managed: ScoredRisk
    improvement: RiskImprovement
    units_selected: int
    concentration: float
    strategy: StrategyBreakdown
