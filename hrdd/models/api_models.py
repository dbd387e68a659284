"""
API Request/Response Models — Public contract of the HTTP endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from hrdd.models.allocation_models import ConfigError, ResponseVector, ToolVector
from hrdd.models.cost_models import CostAssumptions
from hrdd.models.risk_models import ManagedRiskResult, RiskSummary
from hrdd.models.unit_models import DEFAULT_WEIGHTS, PortfolioEntry, PortfolioMetrics, Unit


class ScoreRequest(BaseModel):
    units: list[Unit] = Field(default_factory=list)
    weights: list[float] = Field(default_factory=lambda: list(DEFAULT_WEIGHTS))


class ScoreResponse(BaseModel):
    message: str = "ok"
    scores: dict[str, float] = Field(default_factory=dict)
    bands: dict[str, str] = Field(default_factory=dict)
    errors: list[ConfigError] = Field(default_factory=list)


class PortfolioRequest(BaseModel):
    units: list[Unit] = Field(default_factory=list)
    selection: list[str] = Field(default_factory=list)
    volumes: dict[str, float] = Field(default_factory=dict)
    weights: list[float] = Field(default_factory=lambda: list(DEFAULT_WEIGHTS))


class PortfolioResponse(BaseModel):
    message: str = "ok"
    entries: list[PortfolioEntry] = Field(default_factory=list)
    metrics: PortfolioMetrics = Field(default_factory=PortfolioMetrics)
    band: str = "Low"
    errors: list[ConfigError] = Field(default_factory=list)


class ManagedRiskRequest(BaseModel):
    """Strategy is taken raw and validated explicitly so bad input is reported, not rejected."""

    entries: list[PortfolioEntry] = Field(default_factory=list)
    strategy: dict[str, Any] = Field(default_factory=dict)


class ManagedRiskResponse(BaseModel):
    message: str = "ok"
    result: ManagedRiskResult | None = None
    summary: RiskSummary | None = None
    errors: list[ConfigError] = Field(default_factory=list)


class CostRequest(BaseModel):
    tool_allocation: ToolVector
    response_allocation: ResponseVector
    costs: CostAssumptions = Field(default_factory=CostAssumptions)


class DefaultsResponse(BaseModel):
    weights: list[float]
    indicator_labels: list[str]
    tool_labels: list[str]
    response_labels: list[str]
    tool_coverage: list[float]
    tool_effectiveness: list[float]
    response_allocation: list[float]
    response_effectiveness: list[float]
    focus: float
    costs: CostAssumptions
