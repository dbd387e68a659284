"""
Test fixtures shared across all HRDD risk engine tests.
"""

import pytest

from hrdd.engine.search import SearchParameters
from hrdd.models.allocation_models import StrategyConfig
from hrdd.models.cost_models import CostAssumptions
from hrdd.models.optimizer_models import OptimizationRequest
from hrdd.models.unit_models import PortfolioEntry, Unit


@pytest.fixture
def sample_units():
    """Five units spanning low to very high risk, one with a missing indicator."""
    return [
        Unit(code="AAA", name="Alphaland", indicators=(90, 85, 70, 80, 95), base_risk_score=85),
        Unit(code="BBB", name="Betastan", indicators=(60, 55, 40, 65, 50), base_risk_score=57),
        Unit(code="CCC", name="Gammaria", indicators=(40, 0, 30, 35, 45), base_risk_score=38),
        Unit(code="DDD", name="Deltonia", indicators=(20, 25, 10, 15, 20), base_risk_score=20),
        Unit(code="EEE", name="Epsilor", indicators=(5, 10, 5, 5, 10), base_risk_score=7),
    ]


@pytest.fixture
def sample_entries():
    """Portfolio entries with uneven volumes and a tie at 55."""
    return [
        PortfolioEntry(code="AAA", volume=30, risk=85),
        PortfolioEntry(code="BBB", volume=10, risk=70),
        PortfolioEntry(code="CCC", volume=15, risk=55),
        PortfolioEntry(code="CCD", volume=5, risk=55),
        PortfolioEntry(code="DDD", volume=25, risk=40),
        PortfolioEntry(code="EEE", volume=20, risk=10),
    ]


@pytest.fixture
def default_strategy():
    return StrategyConfig()


@pytest.fixture
def strong_strategy():
    """High coverage and effectiveness, so reduction caps and rank fixes come into play."""
    return StrategyConfig(
        tool_coverage=[80, 70, 60, 60, 50, 50],
        tool_effectiveness=[95, 80, 60, 50, 40, 30],
        response_allocation=[80, 60, 40, 30, 20, 10],
        response_effectiveness=[95, 90, 70, 60, 50, 40],
        focus=0.8,
    )


@pytest.fixture
def default_costs():
    return CostAssumptions()


@pytest.fixture
def fast_params():
    """Small iteration budgets so optimizer tests stay quick."""
    return SearchParameters(
        anneal_iterations=60,
        ga_population=8,
        ga_generations=6,
        local_search_steps=[10.0, 1.0],
        local_search_max_passes=4,
        max_restarts=5,
        time_budget_seconds=60,
    )


@pytest.fixture
def weak_request(sample_entries):
    """
    A portfolio spending its whole budget on the weakest channels.

    Cost of the current allocation with default assumptions is 22,000.
    """
    strategy = StrategyConfig(
        tool_coverage=[0, 0, 0, 0, 0, 100],
        response_allocation=[0, 0, 0, 0, 0, 100],
        focus=0.6,
    )
    return OptimizationRequest(
        entries=sample_entries,
        strategy=strategy,
        target_budget=22000,
        tolerance=1000,
    )


@pytest.fixture
def saturated_request(sample_entries):
    """Everything at 100%: every unit already sits at its reduction cap."""
    strategy = StrategyConfig(
        tool_coverage=[100] * 6,
        tool_effectiveness=[100] * 6,
        response_allocation=[100] * 6,
        response_effectiveness=[100] * 6,
        focus=0.0,
    )
    return OptimizationRequest(
        entries=sample_entries,
        strategy=strategy,
        target_budget=1_062_000,
    )
