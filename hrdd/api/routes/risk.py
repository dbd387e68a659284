"""
Risk Routes — Scoring, portfolio aggregation, managed risk, and cost.

  GET  /defaults      → default weights, strategy, labels and cost assumptions
  GET  /units         → units from the configured country data file
  POST /score         → weighted risk score per unit
  POST /portfolio     → baseline risk and concentration for a selection
  POST /managed-risk  → rank-preserving managed risk + summary
  POST /cost          → budget for a tool/response allocation
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from hrdd.api.dependencies import get_country_data
from hrdd.core.cost_model import cost
from hrdd.core.managed_risk import managed_risk
from hrdd.core.portfolio import aggregate_entries, build_portfolio
from hrdd.core.scorer import score_units
from hrdd.core.summary import risk_band, risk_summary
from hrdd.core.validation import validate_strategy, validate_weights
from hrdd.data.country_loader import CountryData
from hrdd.models.allocation_models import (
    DEFAULT_FOCUS,
    DEFAULT_RESPONSE_ALLOCATION,
    DEFAULT_RESPONSE_EFFECTIVENESS,
    DEFAULT_TOOL_COVERAGE,
    DEFAULT_TOOL_EFFECTIVENESS,
    RESPONSE_LABELS,
    TOOL_LABELS,
)
from hrdd.models.api_models import (
    CostRequest,
    DefaultsResponse,
    ManagedRiskRequest,
    ManagedRiskResponse,
    PortfolioRequest,
    PortfolioResponse,
    ScoreRequest,
    ScoreResponse,
)
from hrdd.models.cost_models import CostAssumptions, CostBreakdown
from hrdd.models.unit_models import DEFAULT_WEIGHTS, INDICATOR_LABELS, Unit

logger = logging.getLogger("hrdd.api.risk")
router = APIRouter()


@router.get("/defaults", response_model=DefaultsResponse)
async def defaults():
    return DefaultsResponse(
        weights=DEFAULT_WEIGHTS,
        indicator_labels=INDICATOR_LABELS,
        tool_labels=TOOL_LABELS,
        response_labels=RESPONSE_LABELS,
        tool_coverage=DEFAULT_TOOL_COVERAGE,
        tool_effectiveness=DEFAULT_TOOL_EFFECTIVENESS,
        response_allocation=DEFAULT_RESPONSE_ALLOCATION,
        response_effectiveness=DEFAULT_RESPONSE_EFFECTIVENESS,
        focus=DEFAULT_FOCUS,
        costs=CostAssumptions(),
    )


@router.get("/units", response_model=list[Unit])
async def units(data: CountryData | None = Depends(get_country_data)):
    """Units loaded from the configured country data file."""
    if data is None:
        raise HTTPException(status_code=404, detail="No country data configured")
    return data.units


@router.post("/score", response_model=ScoreResponse)
async def score_route(req: ScoreRequest):
    """Score every submitted unit with the given weights."""
    valid, errors = validate_weights(req.weights)
    if not valid:
        return ScoreResponse(message="invalid_weights", errors=errors)

    scores = score_units(req.units, req.weights)
    return ScoreResponse(
        scores=scores,
        bands={code: risk_band(s) for code, s in scores.items()},
    )


@router.post("/portfolio", response_model=PortfolioResponse)
async def portfolio_route(req: PortfolioRequest):
    """Resolve a selection against the submitted units and aggregate it."""
    valid, errors = validate_weights(req.weights)
    if not valid:
        return PortfolioResponse(message="invalid_weights", errors=errors)

    portfolio = build_portfolio(req.units, req.selection, req.volumes, req.weights)
    metrics = aggregate_entries(portfolio.entries)
    return PortfolioResponse(
        entries=portfolio.entries,
        metrics=metrics,
        band=risk_band(metrics.baseline_risk),
    )


@router.post("/managed-risk", response_model=ManagedRiskResponse)
async def managed_risk_route(req: ManagedRiskRequest):
    """Compute managed risk after validating the strategy configuration."""
    validation = validate_strategy(req.strategy)
    if not validation.valid or validation.config is None:
        logger.info(f"Rejected strategy config with {len(validation.errors)} errors")
        return ManagedRiskResponse(message="invalid_config", errors=validation.errors)

    try:
        result = managed_risk(req.entries, validation.config)
        return ManagedRiskResponse(
            result=result,
            summary=risk_summary(result, validation.config),
        )
    except Exception:
        logger.exception("Unexpected managed-risk error")
        return ManagedRiskResponse(message="error")


@router.post("/cost", response_model=CostBreakdown)
async def cost_route(req: CostRequest):
    return cost(req.tool_allocation, req.response_allocation, req.costs)
