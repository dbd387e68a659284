"""
Optimizer Data Models — Requests, candidates, and structured outcomes.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from hrdd.models.allocation_models import StrategyConfig
from hrdd.models.cost_models import CostAssumptions
from hrdd.models.unit_models import PortfolioEntry


class RepairStrategy(str, Enum):
    """How budget repairs move a candidate back inside the budget window."""

    BALANCED = "balanced"
    VOICE_PRIORITY = "voice_priority"
    EFFICIENCY_FOCUSED = "efficiency_focused"
    PRESERVE_PRIORITY_CHANNEL = "preserve_priority_channel"


STRATEGY_CYCLE: list[RepairStrategy] = [
    RepairStrategy.BALANCED,
    RepairStrategy.VOICE_PRIORITY,
    RepairStrategy.EFFICIENCY_FOCUSED,
    RepairStrategy.PRESERVE_PRIORITY_CHANNEL,
]


class OptimizationStatus(str, Enum):
    IMPROVED = "improved"
    NO_IMPROVEMENT = "no_improvement"
    ALREADY_OPTIMIZED = "already_optimized"
    KEPT_PREVIOUS = "kept_previous"


class OptimizationRequest(BaseModel):
    """All optimizer inputs. Hashed to detect repeated requests."""

    entries: list[PortfolioEntry] = Field(..., min_length=1)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)
    costs: CostAssumptions = Field(default_factory=CostAssumptions)
    target_budget: float = Field(..., ge=0)
    tolerance: float | None = Field(
        default=None, ge=0, description="Absolute budget tolerance; defaults to a share of budget"
    )


class Evaluation(BaseModel):
    """Fitness of a candidate."""

    fitness: float
    managed_risk: float
    risk_reduction: float
    cost: float
    valid: bool = Field(..., description="Cost inside the budget window")


class OptimizationResult(BaseModel):
    """Structured outcome of an optimize call. Never an exception."""

    status: OptimizationStatus
    tool_coverage: list[float]
    response_allocation: list[float]
    cost: float
    managed_risk: float
    baseline_risk: float
    risk_reduction: float
    original_cost: float
    original_managed_risk: float
    original_risk_reduction: float
    target_budget: float
    tolerance: float
    strategy: RepairStrategy | None = None
    attempts: int = 0
    evaluations: int = 0
    state_hash: str = ""
    run_id: str = ""
    duration_ms: float = 0.0
    message: str = ""
    notes: list[str] = Field(default_factory=list)

    @property
    def improved(self) -> bool:
        return self.status == OptimizationStatus.IMPROVED


class AuditEntry(BaseModel):
    """Audit metadata for an optimize call."""

    run_id: str
    state_hash: str
    status: str
    units: int
    target_budget: float
    cost: float
    managed_risk: float
    risk_reduction: float
    attempts: int = 0
    evaluations: int = 0
    duration_ms: float = 0.0
