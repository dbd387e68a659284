"""
Candidate Allocation — Tool + response vectors searched by the optimizer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from hrdd.models.allocation_models import (
    LINKED_CHANNEL,
    RESPONSE_COUNT,
    TOOL_COUNT,
    StrategyConfig,
)

TOOL = "tool"
RESPONSE = "response"

Slot = tuple[str, int]

# Search granularity in percentage points
_RESOLUTION = 1


def _clean(value: float) -> float:
    return round(max(0.0, min(100.0, value)), _RESOLUTION)


@dataclass
class Allocation:
    """Mutable candidate; call ``normalized()`` after any change."""

    tools: list[float]
    responses: list[float]

    @classmethod
    def from_strategy(cls, strategy: StrategyConfig) -> "Allocation":
        return cls(tools=list(strategy.tool_coverage), responses=list(strategy.response_allocation))

    def copy(self) -> "Allocation":
        return Allocation(tools=list(self.tools), responses=list(self.responses))

    def normalized(self) -> "Allocation":
        """Clamp to [0, 100], round to search resolution, mirror the linked channel."""
        tools = [_clean(v) for v in self.tools]
        responses = [_clean(v) for v in self.responses]
        responses[LINKED_CHANNEL.response_index] = tools[LINKED_CHANNEL.tool_index]
        return Allocation(tools=tools, responses=responses)

    def get(self, slot: Slot) -> float:
        kind, index = slot
        return self.tools[index] if kind == TOOL else self.responses[index]

    def with_value(self, slot: Slot, value: float) -> "Allocation":
        updated = self.copy()
        kind, index = slot
        if kind == TOOL:
            updated.tools[index] = value
        else:
            updated.responses[index] = value
        return updated.normalized()

    def shifted(self, slot: Slot, delta: float) -> "Allocation":
        return self.with_value(slot, self.get(slot) + delta)

    def key(self) -> tuple[float, ...]:
        return tuple(round(v, 6) for v in (*self.tools, *self.responses))


def adjustable_slots(exclude: Sequence[Slot] = ()) -> list[Slot]:
    """Every independently searchable slot. The mirrored response slot is excluded."""
    slots: list[Slot] = [(TOOL, i) for i in range(TOOL_COUNT)]
    slots += [
        (RESPONSE, i)
        for i in range(RESPONSE_COUNT)
        if i != LINKED_CHANNEL.response_index
    ]
    return [s for s in slots if s not in exclude]
