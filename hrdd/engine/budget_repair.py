"""
Budget Repair — Move a candidate back inside the budget window.

Cost is non-decreasing in every slot, so each repair is a bisection over a
single parameter t ∈ [0, 1]:
    over budget:  v' = v × (1 − t)
    under budget: v' = v + (100 − v) × t
The repair strategy decides which slots move, and in which order.
"""

from __future__ import annotations

from typing import Callable, Sequence

from hrdd.config import settings
from hrdd.core.effectiveness import average_effectiveness
from hrdd.engine.allocation import RESPONSE, TOOL, Allocation, Slot, adjustable_slots
from hrdd.engine.fitness import FitnessFunction
from hrdd.models.allocation_models import LINKED_CHANNEL, TOOL_CATALOG
from hrdd.models.optimizer_models import RepairStrategy

VOICE_CATEGORY = "Worker Voice"


def _move(allocation: Allocation, slots: Sequence[Slot], t: float, cutting: bool) -> Allocation:
    moved = allocation.copy()
    for kind, index in slots:
        values = moved.tools if kind == TOOL else moved.responses
        v = values[index]
        values[index] = v * (1.0 - t) if cutting else v + (100.0 - v) * t
    return moved.normalized()


def _bisect(
    allocation: Allocation,
    slots: Sequence[Slot],
    fitness: FitnessFunction,
    max_iterations: int,
) -> tuple[Allocation, bool]:
    """
    Move ``slots`` together until cost enters the budget window.

    Returns:
        (allocation, reached). When the window is not reached, the returned
        allocation stays on the original side of it.
    """
    low_budget, high_budget = fitness.budget_window
    total = fitness.cost_of(allocation)
    if fitness.within_budget(total):
        return allocation, True

    cutting = total > high_budget
    full = _move(allocation, slots, 1.0, cutting)
    full_cost = fitness.cost_of(full)
    if fitness.within_budget(full_cost):
        return full, True
    if (cutting and full_cost > high_budget) or (not cutting and full_cost < low_budget):
        # Even the full move stays outside; take it and let the next slot continue
        return full, False

    lo, hi = 0.0, 1.0
    best = allocation
    for _ in range(max_iterations):
        mid = (lo + hi) / 2.0
        candidate = _move(allocation, slots, mid, cutting)
        c = fitness.cost_of(candidate)
        if fitness.within_budget(c):
            return candidate, True
        still_outside = c > high_budget if cutting else c < low_budget
        if still_outside:
            lo = mid
            best = candidate
        else:
            hi = mid
    return best, False


def _slot_efficiency(slot: Slot, fitness: FitnessFunction) -> float:
    """Effectiveness gained per unit of cost for one percentage point."""
    costs = fitness.costs
    n = costs.unit_count
    rate = costs.hourly_rate
    kind, index = slot

    if kind == TOOL:
        category = next(c for c in TOOL_CATALOG if index in c.tools)
        base = category.base_effectiveness[category.tools.index(index)]
        gain = average_effectiveness(base, fitness.strategy.tool_effectiveness[index]) * category.weight
        marginal = (
            costs.tool_annual_cost[index]
            + costs.tool_per_unit_cost[index] * n
            + costs.tool_hours_per_unit[index] * n * rate
        ) / 100.0
        if index == LINKED_CHANNEL.tool_index:
            marginal += costs.response_hours_per_unit[LINKED_CHANNEL.response_index] * n * rate / 100.0
    else:
        gain = fitness.strategy.response_effectiveness[index] / 100.0
        marginal = costs.response_hours_per_unit[index] * n * rate / 100.0

    if marginal <= 0:
        return float("inf")
    return gain / marginal


def _voice_order(slots: Sequence[Slot], cutting: bool, fitness: FitnessFunction) -> list[Slot]:
    voice = next(c for c in TOOL_CATALOG if c.name == VOICE_CATEGORY)
    voice_slots = [s for s in slots if s[0] == TOOL and s[1] in voice.tools]
    other_tools = [s for s in slots if s[0] == TOOL and s[1] not in voice.tools]
    responses = sorted(
        (s for s in slots if s[0] == RESPONSE),
        key=lambda s: fitness.strategy.response_effectiveness[s[1]],
    )
    if cutting:
        # Weakest channels go first; worker voice is cut last
        return list(reversed(other_tools)) + responses + list(reversed(voice_slots))
    return voice_slots + list(reversed(responses)) + other_tools


def slot_order(
    strategy: RepairStrategy,
    cutting: bool,
    fitness: FitnessFunction,
) -> list[Slot]:
    """Order in which slots are moved by a per-slot repair strategy."""
    slots = adjustable_slots()
    if strategy == RepairStrategy.VOICE_PRIORITY:
        return _voice_order(slots, cutting, fitness)
    if strategy == RepairStrategy.EFFICIENCY_FOCUSED:
        ranked = sorted(slots, key=lambda s: _slot_efficiency(s, fitness))
        return ranked if cutting else list(reversed(ranked))
    return slots


def repair(
    allocation: Allocation,
    fitness: FitnessFunction,
    strategy: RepairStrategy,
    max_iterations: int | None = None,
) -> Allocation:
    """
    Bring ``allocation`` inside the budget window where possible.

    balanced:                  scale every slot together
    preserve_priority_channel: scale every slot except the linked channel
    voice_priority:            protect worker-voice tools, move weak channels first
    efficiency_focused:        cut least cost-efficient / add most cost-efficient first

    Returns:
        The repaired allocation, or the closest attempt when the window is
        unreachable. The fitness function decides validity.
    """
    iterations = max_iterations or settings.repair_max_iterations
    candidate = allocation.normalized()
    total = fitness.cost_of(candidate)
    if fitness.within_budget(total):
        return candidate

    if strategy == RepairStrategy.BALANCED:
        repaired, _ = _bisect(candidate, adjustable_slots(), fitness, iterations)
        return repaired

    if strategy == RepairStrategy.PRESERVE_PRIORITY_CHANNEL:
        protected = [(TOOL, LINKED_CHANNEL.tool_index)]
        repaired, reached = _bisect(candidate, adjustable_slots(exclude=protected), fitness, iterations)
        if reached:
            return repaired
        repaired, _ = _bisect(repaired, protected, fitness, iterations)
        return repaired

    cutting = total > fitness.budget_window[1]
    for slot in slot_order(strategy, cutting, fitness):
        candidate, reached = _bisect(candidate, [slot], fitness, iterations)
        if reached:
            return candidate

    repaired, _ = _bisect(candidate, adjustable_slots(), fitness, iterations)
    return repaired


RepairFn = Callable[[Allocation], Allocation]


def make_repair(fitness: FitnessFunction, strategy: RepairStrategy) -> RepairFn:
    """Bind a fitness function and strategy into a single-argument repair."""
    return lambda allocation: repair(allocation, fitness, strategy)
