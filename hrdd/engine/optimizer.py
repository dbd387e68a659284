"""
Allocation Optimizer — Budget-constrained search for lower managed risk.

Per attempt:
1. Repair the current allocation into the budget window
2. Simulated annealing from there
3. Genetic loop seeded with the start and the annealing best
4. Local search from the genetic best

Attempts (at most five) cycle through repair strategies and stop at the first
valid candidate that improves risk reduction by at least the minimum step.
The optimizer owns a single-slot cache keyed by the state hash; a repeated
request returns the cached result flagged ``already_optimized``.
"""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid

from hrdd.cache.optimization_cache import OptimizationCache
from hrdd.config import settings
from hrdd.engine.allocation import Allocation
from hrdd.engine.budget_repair import make_repair
from hrdd.engine.fitness import FitnessFunction
from hrdd.engine.search import (
    ProgressFn,
    SearchContext,
    SearchParameters,
    genetic_search,
    local_search,
    mutate,
    simulated_annealing,
)
from hrdd.models.optimizer_models import (
    STRATEGY_CYCLE,
    Evaluation,
    OptimizationRequest,
    OptimizationResult,
    OptimizationStatus,
    RepairStrategy,
)

logger = logging.getLogger("hrdd.optimizer")


def dominates(new: OptimizationResult, old: OptimizationResult) -> bool:
    """Lower cost at same-or-better risk, or lower risk at same-or-lower cost."""
    return (new.cost < old.cost and new.managed_risk <= old.managed_risk) or (
        new.managed_risk < old.managed_risk and new.cost <= old.cost
    )


class AllocationOptimizer:
    """
    Multi-strategy optimizer owning its own state cache.

    Concurrent callers sharing an instance are serialized by an internal lock.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        seed: int | None = None,
        cache: OptimizationCache | None = None,
        params: SearchParameters | None = None,
    ) -> None:
        if rng is None:
            rng = random.Random(seed if seed is not None else settings.optimizer_seed)
        self.rng = rng
        self.cache = cache or OptimizationCache()
        self.params = params or SearchParameters()
        self._lock = threading.Lock()

    def tolerance_for(self, request: OptimizationRequest) -> float:
        if request.tolerance is not None:
            return request.tolerance
        return request.target_budget * settings.budget_tolerance_ratio

    def optimize(
        self,
        request: OptimizationRequest,
        progress: ProgressFn | None = None,
    ) -> OptimizationResult:
        """
        Search for a lower-risk allocation within the target budget.

        Args:
            request: Portfolio, strategy, cost assumptions and budget.
            progress: Optional sink called with (phase, iteration, total).

        Returns:
            OptimizationResult. Non-convergence is reported as
            ``no_improvement`` carrying the original allocation.
        """
        with self._lock:
            start = time.monotonic()
            run_id = str(uuid.uuid4())[:8]
            result = self._optimize(request, progress, run_id)
            return result.model_copy(
                update={
                    "run_id": run_id,
                    "duration_ms": round((time.monotonic() - start) * 1000, 2),
                }
            )

    def _optimize(
        self,
        request: OptimizationRequest,
        progress: ProgressFn | None,
        run_id: str,
    ) -> OptimizationResult:
        tolerance = self.tolerance_for(request)
        state_hash = self.cache.hash_state(request, tolerance)
        context_hash = self.cache.hash_context(request)

        cached = self.cache.get(state_hash)
        if cached is not None:
            logger.info(f"[{run_id}] State unchanged since last optimization — returning cached result")
            return cached.result.model_copy(
                update={
                    "status": OptimizationStatus.ALREADY_OPTIMIZED,
                    "message": "Inputs unchanged since the last optimization.",
                    "notes": [*cached.result.notes, f"previous status: {cached.result.status.value}"],
                }
            )

        fitness = FitnessFunction(request, tolerance)
        original = Allocation.from_strategy(request.strategy)
        original_eval = fitness.evaluate(original)
        logger.info(
            f"[{run_id}] Optimizing {len(request.entries)} units: budget={request.target_budget:.0f}"
            f"±{tolerance:.0f}, current cost={original_eval.cost:.0f}, "
            f"managed={original_eval.managed_risk:.2f}"
        )

        best: tuple[Evaluation, Allocation, RepairStrategy] | None = None
        attempts = 0

        if fitness.baseline_risk > 0:
            deadline = time.monotonic() + self.params.time_budget_seconds
            for attempt in range(min(self.params.max_restarts, 5)):
                strategy = STRATEGY_CYCLE[attempt % len(STRATEGY_CYCLE)]
                attempts += 1
                ctx = SearchContext(
                    fitness=fitness,
                    repair=make_repair(fitness, strategy),
                    rng=self.rng,
                    params=self.params,
                    deadline=deadline,
                    progress=progress,
                )
                evaluation, allocation = self._run_attempt(original, attempt, ctx)
                logger.info(
                    f"[{run_id}] Attempt {attempt + 1} ({strategy.value}): "
                    f"valid={evaluation.valid}, managed={evaluation.managed_risk:.2f}, "
                    f"cost={evaluation.cost:.0f}"
                )

                if evaluation.valid and (best is None or evaluation.fitness < best[0].fitness):
                    best = (evaluation, allocation, strategy)
                if best is not None and self._improves(best[0], original_eval):
                    break
                if ctx.expired():
                    logger.warning(f"[{run_id}] Time budget exhausted after {attempts} attempts")
                    break
        else:
            logger.info(f"[{run_id}] Baseline risk is zero — nothing to optimize")

        if best is not None and self._improves(best[0], original_eval):
            evaluation, allocation, strategy = best
            result = self._result(
                OptimizationStatus.IMPROVED,
                request, fitness, original_eval, evaluation, allocation,
                strategy=strategy,
                attempts=attempts,
                state_hash=state_hash,
                message=(
                    f"Risk reduction improved by "
                    f"{evaluation.risk_reduction - original_eval.risk_reduction:.2f} points."
                ),
            )
            result = self._reconcile_with_cache(result, context_hash, fitness, original_eval)
        else:
            result = self._result(
                OptimizationStatus.NO_IMPROVEMENT,
                request, fitness, original_eval, original_eval, original,
                attempts=attempts,
                state_hash=state_hash,
                message="No valid allocation within budget improved on the current one.",
            )

        aliases = []
        if result.status in (OptimizationStatus.IMPROVED, OptimizationStatus.KEPT_PREVIOUS):
            applied = request.model_copy(deep=True)
            applied.strategy.tool_coverage = list(result.tool_coverage)
            applied.strategy.response_allocation = list(result.response_allocation)
            aliases.append(self.cache.hash_state(applied, tolerance))
        self.cache.put(state_hash, context_hash, result, aliases=aliases)

        logger.info(
            f"[{run_id}] {result.status.value}: managed={result.managed_risk:.2f}, "
            f"cost={result.cost:.0f}, evaluations={result.evaluations}"
        )
        return result

    def _run_attempt(self, original: Allocation, attempt: int, ctx: SearchContext) -> tuple[Evaluation, Allocation]:
        start = original.normalized()
        if attempt > 0:
            # Later restarts begin from a scattered copy of the original
            start = mutate(start, ctx.rng, 0.5, ctx.params.ga_mutation_step * 2)
        start = ctx.repair(start)

        annealed_eval, annealed = simulated_annealing(start, ctx)
        evolved_eval, evolved = genetic_search([start, annealed], ctx)
        seed = evolved if evolved_eval.fitness <= annealed_eval.fitness else annealed
        return local_search(seed, ctx)

    @staticmethod
    def _improves(candidate: Evaluation, original: Evaluation) -> bool:
        return (
            candidate.valid
            and candidate.risk_reduction - original.risk_reduction >= settings.min_improvement_pp
        )

    def _reconcile_with_cache(
        self,
        result: OptimizationResult,
        context_hash: str,
        fitness: FitnessFunction,
        original_eval: Evaluation,
    ) -> OptimizationResult:
        """
        Keep a comparable cached result unless the new one strictly dominates it.

        The cached result only competes when it fits this budget window and
        itself improves on the submitted allocation by the minimum step.
        """
        previous = self.cache.latest
        if previous is None or previous.context_hash != context_hash:
            return result
        old = previous.result
        if old.status not in (
            OptimizationStatus.IMPROVED,
            OptimizationStatus.KEPT_PREVIOUS,
            OptimizationStatus.ALREADY_OPTIMIZED,
        ):
            return result
        if not fitness.within_budget(old.cost):
            return result
        if old.risk_reduction - original_eval.risk_reduction < settings.min_improvement_pp:
            logger.info("Cached result does not beat the submitted allocation — ignoring it")
            return result
        if dominates(result, old):
            result.notes.append("Replaces a previous result it strictly dominates.")
            return result

        logger.info("New result does not dominate the cached one — keeping previous")
        return old.model_copy(
            update={
                "status": OptimizationStatus.KEPT_PREVIOUS,
                "state_hash": result.state_hash,
                "target_budget": result.target_budget,
                "tolerance": result.tolerance,
                "original_cost": result.original_cost,
                "original_managed_risk": result.original_managed_risk,
                "original_risk_reduction": result.original_risk_reduction,
                "attempts": result.attempts,
                "evaluations": result.evaluations,
                "message": "Previous result kept: the new search did not strictly dominate it.",
                "notes": [
                    *old.notes,
                    f"rejected candidate: cost={result.cost:.0f}, managed={result.managed_risk:.2f}",
                ],
            }
        )

    def _result(
        self,
        status: OptimizationStatus,
        request: OptimizationRequest,
        fitness: FitnessFunction,
        original_eval: Evaluation,
        evaluation: Evaluation,
        allocation: Allocation,
        strategy: RepairStrategy | None = None,
        attempts: int = 0,
        state_hash: str = "",
        message: str = "",
    ) -> OptimizationResult:
        return OptimizationResult(
            status=status,
            tool_coverage=list(allocation.tools),
            response_allocation=list(allocation.responses),
            cost=evaluation.cost,
            managed_risk=evaluation.managed_risk,
            baseline_risk=fitness.baseline_risk,
            risk_reduction=evaluation.risk_reduction,
            original_cost=original_eval.cost,
            original_managed_risk=original_eval.managed_risk,
            original_risk_reduction=original_eval.risk_reduction,
            target_budget=request.target_budget,
            tolerance=fitness.tolerance,
            strategy=strategy,
            attempts=attempts,
            evaluations=fitness.evaluations,
            state_hash=state_hash,
            message=message,
        )
