"""
Allocation Data Models — Detection tools, response methods, and strategy config.

Tool categories, base effectiveness constants, and the linked channel are
fixed system configuration, not user input.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

TOOL_COUNT = 6
RESPONSE_COUNT = 6

TOOL_LABELS: list[str] = [
    "Continuous Worker Voice",
    "Worker Surveys (annual)",
    "Unannounced Social Audits",
    "Announced Social Audits",
    "Supplier Self-Reporting",
    "Desk-Based Risk Assessment",
]

RESPONSE_LABELS: list[str] = [
    "Suppliers see risks and remedy-impact in realtime",
    "Binding Commercial Levers",
    "Corrective Action Plans with quarterly follow-up",
    "Supplier Development Programmes",
    "Industry Collaboration & Agreements",
    "Follow up only on crisis situations",
]

DEFAULT_TOOL_COVERAGE: list[float] = [5.0, 15.0, 25.0, 60.0, 80.0, 90.0]
DEFAULT_TOOL_EFFECTIVENESS: list[float] = [90.0, 45.0, 25.0, 15.0, 12.0, 5.0]
DEFAULT_RESPONSE_ALLOCATION: list[float] = [10.0, 5.0, 20.0, 20.0, 10.0, 5.0]
DEFAULT_RESPONSE_EFFECTIVENESS: list[float] = [70.0, 85.0, 35.0, 25.0, 15.0, 5.0]
DEFAULT_FOCUS = 0.6


class ToolCategory(BaseModel):
    """A group of detection tools sharing a category weight."""

    model_config = ConfigDict(frozen=True)

    name: str
    tools: tuple[int, ...] = Field(..., description="Tool slot indices in this category")
    base_effectiveness: tuple[float, ...] = Field(
        ..., description="Base effectiveness (0-1) per member tool, same order as tools"
    )
    weight: float = Field(..., gt=0, le=1)


TOOL_CATALOG: tuple[ToolCategory, ...] = (
    ToolCategory(name="Worker Voice", tools=(0, 1), base_effectiveness=(0.90, 0.45), weight=1.0),
    ToolCategory(name="Audit", tools=(2, 3), base_effectiveness=(0.25, 0.15), weight=0.85),
    ToolCategory(name="Passive", tools=(4, 5), base_effectiveness=(0.12, 0.05), weight=0.70),
)


class LinkedChannel(BaseModel):
    """A tool slot whose allocation is mirrored by a response slot."""

    model_config = ConfigDict(frozen=True)

    tool_index: int
    response_index: int


# Continuous worker voice doubles as the realtime remedy channel
LINKED_CHANNEL = LinkedChannel(tool_index=0, response_index=0)

Percent = Annotated[float, Field(ge=0, le=100)]
ToolVector = Annotated[list[Percent], Field(min_length=TOOL_COUNT, max_length=TOOL_COUNT)]
ResponseVector = Annotated[
    list[Percent], Field(min_length=RESPONSE_COUNT, max_length=RESPONSE_COUNT)
]


class StrategyConfig(BaseModel):
    """Complete detection/response strategy with focus."""

    tool_coverage: ToolVector = Field(default_factory=lambda: list(DEFAULT_TOOL_COVERAGE))
    tool_effectiveness: ToolVector = Field(
        default_factory=lambda: list(DEFAULT_TOOL_EFFECTIVENESS)
    )
    response_allocation: ResponseVector = Field(
        default_factory=lambda: list(DEFAULT_RESPONSE_ALLOCATION)
    )
    response_effectiveness: ResponseVector = Field(
        default_factory=lambda: list(DEFAULT_RESPONSE_EFFECTIVENESS)
    )
    focus: float = Field(default=DEFAULT_FOCUS, ge=0, le=1)


class ConfigError(BaseModel):
    """One invalid field found during validation."""

    field: str
    message: str


class StrategyValidation(BaseModel):
    """Outcome of validating a raw strategy configuration."""

    valid: bool
    config: StrategyConfig | None = None
    errors: list[ConfigError] = Field(default_factory=list)


class CoverageDistribution(BaseModel):
    """Per-unit tool coverage after focus redistribution."""

    coverage: dict[str, list[float]] = Field(
        default_factory=dict, description="unit code -> six coverage percentages"
    )
    adjustments: dict[str, float] = Field(
        default_factory=dict, description="unit code -> adjustment × boost before conservation"
    )
    conservation_factors: list[float] = Field(
        default_factory=lambda: [1.0] * TOOL_COUNT,
        description="Per-tool scale applied by resource conservation (1 = untouched)",
    )
