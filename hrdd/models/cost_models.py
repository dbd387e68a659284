"""
Cost Data Models — Budget assumptions and the resulting cost breakdown.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from hrdd.models.allocation_models import RESPONSE_COUNT, TOOL_COUNT

NonNegative = Annotated[float, Field(ge=0)]
ToolCosts = Annotated[list[NonNegative], Field(min_length=TOOL_COUNT, max_length=TOOL_COUNT)]
ResponseCosts = Annotated[
    list[NonNegative], Field(min_length=RESPONSE_COUNT, max_length=RESPONSE_COUNT)
]


class CostAssumptions(BaseModel):
    """Per-tool and per-response cost drivers. All values non-negative."""

    tool_annual_cost: ToolCosts = Field(
        default_factory=lambda: [12000.0, 6000.0, 0.0, 0.0, 0.0, 2000.0],
        description="Fixed annual cost of running each tool at full coverage",
    )
    tool_per_unit_cost: ToolCosts = Field(
        default_factory=lambda: [0.0, 500.0, 3000.0, 2000.0, 0.0, 0.0],
        description="Variable cost per covered unit (e.g. audit fee per supplier)",
    )
    tool_hours_per_unit: ToolCosts = Field(
        default_factory=lambda: [2.0, 4.0, 6.0, 4.0, 2.0, 1.0],
        description="Internal hours per covered unit",
    )
    response_hours_per_unit: ResponseCosts = Field(
        default_factory=lambda: [8.0, 12.0, 24.0, 40.0, 16.0, 4.0],
        description="Internal hours per unit reached by each response method",
    )
    hourly_rate: NonNegative = Field(default=40.0, description="Internal cost per hour")
    unit_count: int = Field(default=100, ge=0, description="Number of suppliers / units")


class CostBreakdown(BaseModel):
    """Total cost with the per-slot terms that make it up."""

    total: float = 0.0
    tool_costs: list[float] = Field(default_factory=lambda: [0.0] * TOOL_COUNT)
    response_costs: list[float] = Field(default_factory=lambda: [0.0] * RESPONSE_COUNT)
    external_cost: float = Field(default=0.0, description="Fixed + per-unit tool spend")
    internal_cost: float = Field(default=0.0, description="Internal hours × rate")
    internal_hours: float = 0.0
