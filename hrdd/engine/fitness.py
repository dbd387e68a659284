"""
Fitness Function — Deterministic scoring of candidate allocations.

fitness = managed risk                         if cost is inside the budget window
        = penalty + managed risk + distance    otherwise

No randomness lives here; the search driver owns the random source.
Evaluations are memoized per instance, i.e. per optimize call.
"""

from __future__ import annotations

from hrdd.config import settings
from hrdd.core.cost_model import cost
from hrdd.core.managed_risk import portfolio_managed_risk, risk_reduction
from hrdd.core.portfolio import aggregate_entries
from hrdd.engine.allocation import Allocation
from hrdd.models.optimizer_models import Evaluation, OptimizationRequest


class FitnessFunction:
    """Managed risk with a budget-window penalty."""

    def __init__(self, request: OptimizationRequest, tolerance: float) -> None:
        self.entries = request.entries
        self.strategy = request.strategy
        self.costs = request.costs
        self.target = request.target_budget
        self.tolerance = tolerance
        self.metrics = aggregate_entries(self.entries)
        self._memo: dict[tuple[float, ...], Evaluation] = {}
        self.evaluations = 0

    @property
    def baseline_risk(self) -> float:
        return self.metrics.baseline_risk

    @property
    def budget_window(self) -> tuple[float, float]:
        return self.target - self.tolerance, self.target + self.tolerance

    def cost_of(self, allocation: Allocation) -> float:
        return cost(allocation.tools, allocation.responses, self.costs).total

    def within_budget(self, total: float) -> bool:
        return abs(total - self.target) <= self.tolerance

    def managed_of(self, allocation: Allocation) -> float:
        return portfolio_managed_risk(
            self.entries,
            allocation.tools,
            self.strategy.tool_effectiveness,
            allocation.responses,
            self.strategy.response_effectiveness,
            self.strategy.focus,
            self.metrics,
        )

    def evaluate(self, allocation: Allocation) -> Evaluation:
        key = allocation.key()
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        self.evaluations += 1
        total = self.cost_of(allocation)
        managed = self.managed_of(allocation)
        valid = self.within_budget(total)

        fitness = managed
        if not valid:
            distance = abs(total - self.target) / max(self.tolerance, 1.0)
            fitness = settings.invalid_penalty + managed + distance

        evaluation = Evaluation(
            fitness=fitness,
            managed_risk=managed,
            risk_reduction=risk_reduction(self.baseline_risk, managed),
            cost=total,
            valid=valid,
        )
        self._memo[key] = evaluation
        return evaluation
