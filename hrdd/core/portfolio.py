"""
Portfolio Aggregator — Baseline risk and risk concentration.

baseline = Σ(volume × risk) / Σ(volume)
K        = max(1, Σ(share × risk²) / baseline²)
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from hrdd.config import settings
from hrdd.core.scorer import score
from hrdd.models.unit_models import (
    DEFAULT_WEIGHTS,
    Portfolio,
    PortfolioEntry,
    PortfolioMetrics,
    Unit,
)

logger = logging.getLogger("hrdd.portfolio")


def _volume_of(code: str, volumes: Mapping[str, float]) -> float:
    volume = volumes.get(code)
    if isinstance(volume, (int, float)) and not isinstance(volume, bool):
        return max(0.0, float(volume))
    return settings.default_volume


def aggregate(
    selection: Sequence[str],
    volumes: Mapping[str, float] | None,
    scores: Mapping[str, float] | None,
) -> PortfolioMetrics:
    """
    Combine per-unit scores and volumes into portfolio metrics.

    Args:
        selection: Selected unit codes, in order.
        volumes: code -> volume; missing codes use the default volume.
        scores: code -> risk score; missing codes count as 0.

    Returns:
        PortfolioMetrics. Empty or zero-volume portfolios yield baseline 0
        and concentration 1.
    """
    if not selection:
        return PortfolioMetrics()

    volumes = volumes or {}
    scores = scores or {}

    pairs: list[tuple[float, float]] = []
    total_volume = 0.0
    weighted_risk = 0.0
    for code in selection:
        volume = _volume_of(code, volumes)
        risk = scores.get(code, 0.0) or 0.0
        pairs.append((volume, risk))
        total_volume += volume
        weighted_risk += volume * risk

    if total_volume <= 0:
        return PortfolioMetrics(total_volume=0.0)

    baseline = weighted_risk / total_volume
    weighted_squares = sum((v / total_volume) * r * r for v, r in pairs)

    concentration = 1.0
    if baseline > 0 and weighted_squares > 0:
        concentration = max(1.0, weighted_squares / (baseline * baseline))

    return PortfolioMetrics(
        baseline_risk=baseline,
        total_volume=total_volume,
        weighted_risk=weighted_risk,
        weighted_risk_squares=weighted_squares,
        concentration=concentration,
    )


def aggregate_entries(entries: Sequence[PortfolioEntry]) -> PortfolioMetrics:
    """Aggregate an already-built list of portfolio entries."""
    return aggregate(
        [e.code for e in entries],
        {e.code: e.volume for e in entries},
        {e.code: e.risk for e in entries},
    )


def build_portfolio(
    units: Iterable[Unit],
    selection: Sequence[str],
    volumes: Mapping[str, float] | None = None,
    weights: Sequence[float] = DEFAULT_WEIGHTS,
) -> Portfolio:
    """
    Resolve selected codes against known units and score them.

    Unknown codes are dropped with a warning; duplicates keep the first
    occurrence.
    """
    by_code = {u.code: u for u in units}
    volumes = volumes or {}

    entries: list[PortfolioEntry] = []
    seen: set[str] = set()
    for code in selection:
        if code in seen:
            continue
        unit = by_code.get(code)
        if unit is None:
            logger.warning(f"Dropping unknown unit code from selection: {code}")
            continue
        seen.add(code)
        entries.append(
            PortfolioEntry(
                code=code,
                volume=_volume_of(code, volumes),
                risk=score(unit, weights),
            )
        )

    return Portfolio(entries=entries)
