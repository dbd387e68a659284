"""
Effectiveness Aggregators — Detection and response effectiveness.

Detection uses complement-of-product within and across tool categories
(independent detection channels) and is capped by the detection ceiling.
Response is a plain allocation-weighted average: response levers are
independent remediation paths, not overlapping channels.
"""

from __future__ import annotations

from typing import Sequence

from hrdd.config import settings
from hrdd.core.validation import is_valid_response_vector, is_valid_tool_vector
from hrdd.models.allocation_models import (
    RESPONSE_LABELS,
    TOOL_CATALOG,
    TOOL_LABELS,
    ToolCategory,
)
from hrdd.models.risk_models import PrimaryResponse, ToolContribution


def _pct(value: float) -> float:
    return max(0.0, min(100.0, value or 0.0)) / 100.0


def average_effectiveness(base: float, user_percent: float) -> float:
    """Mean of the fixed base rate and the user-supplied rate (both 0-1)."""
    return (base + _pct(user_percent)) / 2.0


def category_detection(
    category: ToolCategory,
    coverage: Sequence[float],
    tool_effectiveness: Sequence[float],
) -> float:
    """1 − Π(1 − coverage × avg effectiveness) over the category's tools."""
    product = 1.0
    for tool_index, base in zip(category.tools, category.base_effectiveness):
        rate = average_effectiveness(base, tool_effectiveness[tool_index])
        product *= 1.0 - _pct(coverage[tool_index]) * rate
    return 1.0 - product


def detection_effectiveness(
    coverage: Sequence[float],
    tool_effectiveness: Sequence[float],
) -> float:
    """
    Fold per-tool coverage and effectiveness into one detection score.

    Returns:
        Detection effectiveness in [0, detection_ceiling]; 0 for invalid input.
    """
    if not is_valid_tool_vector(coverage) or not is_valid_tool_vector(tool_effectiveness):
        return 0.0

    combined = 0.0
    for category in TOOL_CATALOG:
        detected = category_detection(category, coverage, tool_effectiveness)
        combined = 1.0 - (1.0 - combined) * (1.0 - detected * category.weight)

    return min(combined, settings.detection_ceiling)


def response_effectiveness(
    allocation: Sequence[float],
    effectiveness: Sequence[float],
) -> float:
    """Allocation-weighted average response effectiveness (0-1)."""
    if not is_valid_response_vector(allocation) or not is_valid_response_vector(effectiveness):
        return 0.0

    total_weight = sum(allocation)
    if total_weight <= 0:
        return 0.0
    return sum(w * _pct(e) for w, e in zip(allocation, effectiveness)) / total_weight


def tool_contributions(
    coverage: Sequence[float],
    tool_effectiveness: Sequence[float],
) -> list[ToolContribution]:
    """Explainable per-tool contribution breakdown."""
    if not is_valid_tool_vector(coverage) or not is_valid_tool_vector(tool_effectiveness):
        return []

    contributions: list[ToolContribution] = []
    for category in TOOL_CATALOG:
        for tool_index, base in zip(category.tools, category.base_effectiveness):
            user = max(0.0, min(100.0, tool_effectiveness[tool_index]))
            avg = average_effectiveness(base, user)
            cov = max(0.0, min(100.0, coverage[tool_index]))
            contributions.append(
                ToolContribution(
                    name=TOOL_LABELS[tool_index],
                    category=category.name,
                    coverage=cov,
                    base_effectiveness=round(base * 100),
                    user_effectiveness=user,
                    average_effectiveness=round(avg * 100),
                    contribution=cov * avg,
                )
            )

    order = {label: i for i, label in enumerate(TOOL_LABELS)}
    contributions.sort(key=lambda c: order[c.name])
    return contributions


def primary_response_method(
    allocation: Sequence[float],
    effectiveness: Sequence[float],
) -> PrimaryResponse:
    """Response method with the largest allocation (first one on ties)."""
    primary = 0
    max_weight = 0.0
    for i, weight in enumerate(allocation[: len(RESPONSE_LABELS)]):
        if weight > max_weight:
            max_weight = weight
            primary = i

    eff = effectiveness[primary] if primary < len(effectiveness) else 0.0
    return PrimaryResponse(
        method=RESPONSE_LABELS[primary],
        weight=max_weight,
        effectiveness=eff,
    )
