"""
Risk Scorer — Weighted risk score per unit.

score = Σ(value × weight) / Σ(weight) over indicators with value > 0.
A zero indicator is treated as unknown and excluded, not as zero risk.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from hrdd.core.validation import is_valid_weights
from hrdd.models.unit_models import DEFAULT_WEIGHTS, Unit


def score_indicators(values: Sequence[float], weights: Sequence[float]) -> float:
    """Score raw indicator values. Returns 0 when nothing qualifies."""
    if not is_valid_weights(weights) or len(values) != len(weights):
        return 0.0

    weighted_sum = 0.0
    total_weight = 0.0
    for value, weight in zip(values, weights):
        if value > 0:
            weighted_sum += value * weight
            total_weight += weight

    if total_weight <= 0:
        return 0.0
    return min(100.0, max(0.0, weighted_sum / total_weight))


def score(unit: Unit, weights: Sequence[float] = DEFAULT_WEIGHTS) -> float:
    """Compute a unit's weighted risk score in [0, 100]."""
    return score_indicators(unit.indicators, weights)


def score_units(
    units: Iterable[Unit],
    weights: Sequence[float] = DEFAULT_WEIGHTS,
) -> dict[str, float]:
    """Score every unit, keyed by code."""
    return {unit.code: score(unit, weights) for unit in units}
