"""
Unit & Portfolio Data Models — Assessable entities, weights, and portfolio entries.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

INDICATOR_COUNT = 5

INDICATOR_LABELS: list[str] = [
    "ITUC Rights Rating",
    "Corruption Index",
    "Migrant Worker Prevalence",
    "WJP Index",
    "Walk Free Slavery Index",
]

DEFAULT_WEIGHTS: list[float] = [20.0, 20.0, 5.0, 10.0, 10.0]

Indicator = Annotated[float, Field(ge=0)]


class Unit(BaseModel):
    """An assessable entity (e.g. a country) with five indicator values.

    A zero indicator means "unknown / excluded", not "zero risk".
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, description="Unique identifier, e.g. ISO code")
    name: str = Field(default="", description="Display name")
    indicators: tuple[Indicator, Indicator, Indicator, Indicator, Indicator]
    base_risk_score: float = Field(
        default=0.0, ge=0, description="Reference score shipped with the source data"
    )


class WeightVector(BaseModel):
    """Five indicator weights, each bounded to [0, 50]."""

    weights: Annotated[
        list[Annotated[float, Field(ge=0, le=50)]],
        Field(min_length=INDICATOR_COUNT, max_length=INDICATOR_COUNT),
    ] = Field(default_factory=lambda: list(DEFAULT_WEIGHTS))


class PortfolioEntry(BaseModel):
    """A selected unit with its exposure volume and computed risk score."""

    code: str
    volume: float = Field(default=10.0, ge=0)
    risk: float = Field(default=0.0, ge=0, le=100)


class Portfolio(BaseModel):
    """Ordered selection of units. Every code resolves to a known Unit."""

    entries: list[PortfolioEntry] = Field(default_factory=list)

    @property
    def codes(self) -> list[str]:
        return [e.code for e in self.entries]


class PortfolioMetrics(BaseModel):
    """Baseline portfolio risk and concentration."""

    baseline_risk: float = 0.0
    total_volume: float = 0.0
    weighted_risk: float = Field(default=0.0, description="Σ volume × risk")
    weighted_risk_squares: float = Field(default=0.0, description="Σ share × risk²")
    concentration: float = Field(default=1.0, ge=1.0, description="Risk concentration K")
