"""
Tests for Allocation Optimizer — budget compliance, caching, and outcomes.
"""

import random

import pytest

from hrdd.cache.optimization_cache import OptimizationCache
from hrdd.core.cost_model import total_cost
from hrdd.engine.optimizer import AllocationOptimizer, dominates
from hrdd.models.optimizer_models import (
    OptimizationRequest,
    OptimizationResult,
    OptimizationStatus,
)
from hrdd.models.unit_models import PortfolioEntry


def _result(cost, managed, status=OptimizationStatus.IMPROVED):
    return OptimizationResult(
        status=status,
        tool_coverage=[0.0] * 6,
        response_allocation=[0.0] * 6,
        cost=cost,
        managed_risk=managed,
        baseline_risk=50.0,
        risk_reduction=(50.0 - managed) / 50.0 * 100,
        original_cost=cost,
        original_managed_risk=50.0,
        original_risk_reduction=0.0,
        target_budget=cost,
        tolerance=cost * 0.02,
    )


def test_dominance():
    assert dominates(_result(900, 30), _result(1000, 30))
    assert dominates(_result(1000, 25), _result(1000, 30))
    assert not dominates(_result(1000, 30), _result(1000, 30))
    assert not dominates(_result(900, 35), _result(1000, 30))


def test_saturated_allocation_reports_no_improvement(saturated_request, fast_params):
    assert total_cost(
        saturated_request.strategy.tool_coverage,
        saturated_request.strategy.response_allocation,
        saturated_request.costs,
    ) == pytest.approx(saturated_request.target_budget)

    optimizer = AllocationOptimizer(seed=1, params=fast_params)
    result = optimizer.optimize(saturated_request)

    assert result.status == OptimizationStatus.NO_IMPROVEMENT
    assert result.tool_coverage == saturated_request.strategy.tool_coverage
    assert result.response_allocation == saturated_request.strategy.response_allocation
    assert result.cost == pytest.approx(result.original_cost)
    assert result.managed_risk == pytest.approx(result.original_managed_risk)
    assert 1 <= result.attempts <= 5


def test_weak_allocation_improves_within_budget(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    result = optimizer.optimize(weak_request)

    assert result.status == OptimizationStatus.IMPROVED
    assert result.improved
    assert abs(result.cost - weak_request.target_budget) <= result.tolerance
    assert result.managed_risk < result.original_managed_risk
    assert result.risk_reduction - result.original_risk_reduction >= 0.1
    assert result.response_allocation[0] == result.tool_coverage[0]
    assert result.cost == pytest.approx(
        total_cost(result.tool_coverage, result.response_allocation, weak_request.costs)
    )


def test_default_tolerance_is_two_percent(weak_request):
    request = weak_request.model_copy(update={"tolerance": None})
    assert AllocationOptimizer(seed=1).tolerance_for(request) == pytest.approx(440)


def test_repeated_request_is_already_optimized(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    first = optimizer.optimize(weak_request)
    second = optimizer.optimize(weak_request)

    assert second.status == OptimizationStatus.ALREADY_OPTIMIZED
    assert second.tool_coverage == first.tool_coverage
    assert second.response_allocation == first.response_allocation
    assert second.evaluations == first.evaluations


def test_applying_the_result_is_already_optimized(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    first = optimizer.optimize(weak_request)

    applied = weak_request.model_copy(deep=True)
    applied.strategy.tool_coverage = list(first.tool_coverage)
    applied.strategy.response_allocation = list(first.response_allocation)
    again = optimizer.optimize(applied)

    assert again.status == OptimizationStatus.ALREADY_OPTIMIZED


def test_changed_budget_runs_a_new_search(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    optimizer.optimize(weak_request)
    changed = weak_request.model_copy(update={"target_budget": 30000})
    result = optimizer.optimize(changed)
    assert result.status != OptimizationStatus.ALREADY_OPTIMIZED


def test_dominating_cached_result_is_kept(weak_request, fast_params):
    cache = OptimizationCache()
    previous = _result(weak_request.target_budget, 0.0)
    cache.put("earlier-state", OptimizationCache.hash_context(weak_request), previous)

    optimizer = AllocationOptimizer(seed=7, params=fast_params, cache=cache)
    result = optimizer.optimize(weak_request)

    assert result.status == OptimizationStatus.KEPT_PREVIOUS
    assert result.managed_risk == 0.0
    assert result.original_cost == pytest.approx(22000)


def test_cached_result_worse_than_submitted_allocation_is_not_kept(weak_request, fast_params):
    reference = AllocationOptimizer(seed=7, params=fast_params).optimize(weak_request)

    # In budget at the bottom of the window, but weaker than the submitted allocation
    worse = _result(weak_request.target_budget - weak_request.tolerance, 0.0).model_copy(
        update={
            "managed_risk": reference.original_managed_risk + 5,
            "risk_reduction": reference.original_risk_reduction - 5,
        }
    )
    cache = OptimizationCache()
    cache.put("earlier-state", OptimizationCache.hash_context(weak_request), worse)

    optimizer = AllocationOptimizer(seed=7, params=fast_params, cache=cache)
    result = optimizer.optimize(weak_request)

    assert result.status == OptimizationStatus.IMPROVED
    assert result.managed_risk <= result.original_managed_risk
    assert result.tool_coverage == reference.tool_coverage


def test_kept_previous_never_regresses_on_submitted_allocation(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    first = optimizer.optimize(weak_request)
    assert first.status == OptimizationStatus.IMPROVED

    # A stronger in-budget allocation for the same portfolio and assumptions
    stronger = weak_request.model_copy(deep=True)
    stronger.strategy.tool_coverage = [42, 0, 0, 0, 0, 0]
    stronger.strategy.response_allocation = [42, 0, 0, 0, 0, 0]
    assert total_cost([42, 0, 0, 0, 0, 0], [42, 0, 0, 0, 0, 0], stronger.costs) == pytest.approx(21840)

    result = optimizer.optimize(stronger)

    assert result.status != OptimizationStatus.ALREADY_OPTIMIZED
    assert result.original_cost == pytest.approx(21840)
    assert result.managed_risk <= result.original_managed_risk
    if result.status == OptimizationStatus.KEPT_PREVIOUS:
        assert result.tool_coverage == first.tool_coverage
        assert first.risk_reduction - result.original_risk_reduction >= 0.1


def test_result_carries_run_id_and_duration(weak_request, fast_params):
    optimizer = AllocationOptimizer(seed=7, params=fast_params)
    first = optimizer.optimize(weak_request)
    second = optimizer.optimize(weak_request)

    assert len(first.run_id) == 8
    assert first.duration_ms > 0
    assert second.status == OptimizationStatus.ALREADY_OPTIMIZED
    assert second.run_id != first.run_id


def test_cached_result_from_other_portfolio_is_ignored(weak_request, fast_params):
    cache = OptimizationCache()
    other = weak_request.model_copy(
        update={"entries": [PortfolioEntry(code="ZZZ", volume=1, risk=99)]}
    )
    cache.put("earlier-state", OptimizationCache.hash_context(other), _result(22000, 0.0))

    optimizer = AllocationOptimizer(seed=7, params=fast_params, cache=cache)
    result = optimizer.optimize(weak_request)
    assert result.status == OptimizationStatus.IMPROVED


def test_zero_baseline_skips_search(weak_request, fast_params):
    request = weak_request.model_copy(
        update={"entries": [PortfolioEntry(code="A", volume=10, risk=0)]}
    )
    result = AllocationOptimizer(seed=1, params=fast_params).optimize(request)
    assert result.status == OptimizationStatus.NO_IMPROVEMENT
    assert result.attempts == 0


def test_same_seed_same_result(weak_request, fast_params):
    first = AllocationOptimizer(rng=random.Random(42), params=fast_params).optimize(weak_request)
    second = AllocationOptimizer(rng=random.Random(42), params=fast_params).optimize(weak_request)
    assert first.tool_coverage == second.tool_coverage
    assert first.response_allocation == second.response_allocation
    assert first.evaluations == second.evaluations


def test_progress_callback_reports_phases(weak_request, fast_params):
    phases = set()

    def progress(phase, iteration, total):
        phases.add(phase)
        assert 1 <= iteration <= total

    AllocationOptimizer(seed=3, params=fast_params).optimize(weak_request, progress=progress)
    assert {"annealing", "genetic", "local_search"} <= phases


def test_failing_progress_callback_does_not_break_search(weak_request, fast_params):
    def progress(phase, iteration, total):
        raise RuntimeError("display went away")

    result = AllocationOptimizer(seed=3, params=fast_params).optimize(weak_request, progress=progress)
    assert result.status == OptimizationStatus.IMPROVED


def test_unreachable_budget_reports_no_improvement(sample_entries, fast_params):
    request = OptimizationRequest(entries=sample_entries, target_budget=5_000_000)
    result = AllocationOptimizer(seed=1, params=fast_params).optimize(request)
    assert result.status == OptimizationStatus.NO_IMPROVEMENT
    assert result.tool_coverage == request.strategy.tool_coverage
