"""
Cost Model — Total budget for a tool + response allocation.

Per tool:     fixed × ratio + per_unit × ceil(n × ratio) + ceil(n × ratio) × hours × rate
Per response: ceil(n × ratio) × hours × rate
"""

from __future__ import annotations

import math
from typing import Sequence

from hrdd.core.validation import is_valid_response_vector, is_valid_tool_vector
from hrdd.models.cost_models import CostAssumptions, CostBreakdown

# Guards ceil() against float noise such as 100 × 0.07 = 7.000000000000001
_CEIL_PRECISION = 9


def units_reached(unit_count: int, percent: float) -> int:
    """Whole units reached at a coverage percentage."""
    ratio = max(0.0, min(100.0, percent)) / 100.0
    return math.ceil(round(unit_count * ratio, _CEIL_PRECISION))


def cost(
    tool_allocation: Sequence[float],
    response_allocation: Sequence[float],
    assumptions: CostAssumptions,
    unit_count: int | None = None,
    hourly_rate: float | None = None,
) -> CostBreakdown:
    """
    Convert allocations into a total budget figure.

    Args:
        tool_allocation: Six tool coverage percentages.
        response_allocation: Six response allocation percentages.
        assumptions: Cost drivers.
        unit_count: Overrides assumptions.unit_count when given.
        hourly_rate: Overrides assumptions.hourly_rate when given.

    Returns:
        CostBreakdown. Invalid allocation vectors contribute zero cost.
    """
    n = assumptions.unit_count if unit_count is None else max(0, int(unit_count))
    rate = assumptions.hourly_rate if hourly_rate is None else max(0.0, float(hourly_rate))

    tool_costs = [0.0] * len(assumptions.tool_annual_cost)
    response_costs = [0.0] * len(assumptions.response_hours_per_unit)
    external = 0.0
    hours = 0.0

    if is_valid_tool_vector(tool_allocation):
        for i, percent in enumerate(tool_allocation):
            ratio = percent / 100.0
            reached = units_reached(n, percent)
            spend = (
                assumptions.tool_annual_cost[i] * ratio
                + assumptions.tool_per_unit_cost[i] * reached
            )
            tool_hours = reached * assumptions.tool_hours_per_unit[i]
            tool_costs[i] = spend + tool_hours * rate
            external += spend
            hours += tool_hours

    if is_valid_response_vector(response_allocation):
        for i, percent in enumerate(response_allocation):
            response_hours = units_reached(n, percent) * assumptions.response_hours_per_unit[i]
            response_costs[i] = response_hours * rate
            hours += response_hours

    internal = hours * rate
    return CostBreakdown(
        total=external + internal,
        tool_costs=tool_costs,
        response_costs=response_costs,
        external_cost=external,
        internal_cost=internal,
        internal_hours=hours,
    )


def total_cost(
    tool_allocation: Sequence[float],
    response_allocation: Sequence[float],
    assumptions: CostAssumptions,
) -> float:
    """Shortcut for ``cost(...).total``."""
    return cost(tool_allocation, response_allocation, assumptions).total
