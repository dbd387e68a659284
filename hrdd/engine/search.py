"""
Search Phases — Simulated annealing, genetic loop, and local search.

Every phase takes a SearchContext carrying the fitness function, the bound
budget repair, the injected random source, iteration budgets, a wall-clock
deadline, and an optional progress sink.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable

from hrdd.config import settings
from hrdd.engine.allocation import Allocation, adjustable_slots
from hrdd.engine.budget_repair import RepairFn
from hrdd.engine.fitness import FitnessFunction
from hrdd.models.optimizer_models import Evaluation

logger = logging.getLogger("hrdd.optimizer.search")

ProgressFn = Callable[[str, int, int], None]

Scored = tuple[Evaluation, Allocation]


@dataclass
class SearchParameters:
    """Iteration budgets and operator settings for one optimizer."""

    anneal_iterations: int = field(default_factory=lambda: settings.anneal_iterations)
    anneal_initial_temperature: float = field(
        default_factory=lambda: settings.anneal_initial_temperature
    )
    anneal_cooling_rate: float = field(default_factory=lambda: settings.anneal_cooling_rate)
    anneal_step: float = field(default_factory=lambda: settings.anneal_step)
    ga_population: int = field(default_factory=lambda: settings.ga_population)
    ga_generations: int = field(default_factory=lambda: settings.ga_generations)
    ga_elite: int = field(default_factory=lambda: settings.ga_elite)
    ga_mutation_rate: float = field(default_factory=lambda: settings.ga_mutation_rate)
    ga_mutation_step: float = field(default_factory=lambda: settings.ga_mutation_step)
    local_search_steps: list[float] = field(
        default_factory=lambda: list(settings.local_search_steps)
    )
    local_search_max_passes: int = field(default_factory=lambda: settings.local_search_max_passes)
    max_restarts: int = field(default_factory=lambda: settings.optimizer_max_restarts)
    time_budget_seconds: float = field(
        default_factory=lambda: settings.optimizer_time_budget_seconds
    )


@dataclass
class SearchContext:
    fitness: FitnessFunction
    repair: RepairFn
    rng: random.Random
    params: SearchParameters
    deadline: float
    progress: ProgressFn | None = None

    def expired(self) -> bool:
        return time.monotonic() >= self.deadline

    def score(self, allocation: Allocation) -> Scored:
        return self.fitness.evaluate(allocation), allocation

    def report(self, phase: str, iteration: int, total: int) -> None:
        if self.progress is None:
            return
        try:
            self.progress(phase, iteration, total)
        except Exception:
            # Progress is a reporting side-channel and must not break the search
            logger.warning("Progress callback failed", exc_info=True)


def perturb(allocation: Allocation, rng: random.Random, step: float) -> Allocation:
    """Move one random adjustable slot by up to ±step."""
    slot = rng.choice(adjustable_slots())
    return allocation.shifted(slot, rng.uniform(-step, step))


def mutate(allocation: Allocation, rng: random.Random, rate: float, step: float) -> Allocation:
    """Bounded mutation: each slot moves by up to ±step with probability ``rate``."""
    mutated = allocation.copy()
    for slot in adjustable_slots():
        if rng.random() < rate:
            mutated = mutated.shifted(slot, rng.uniform(-step, step))
    return mutated.normalized()


def crossover(a: Allocation, b: Allocation, rng: random.Random) -> Allocation:
    """Blended crossover with an independent mixing weight per slot."""
    tools = []
    for x, y in zip(a.tools, b.tools):
        alpha = rng.random()
        tools.append(alpha * x + (1.0 - alpha) * y)
    responses = []
    for x, y in zip(a.responses, b.responses):
        alpha = rng.random()
        responses.append(alpha * x + (1.0 - alpha) * y)
    return Allocation(tools=tools, responses=responses).normalized()


def _tournament(population: list[Scored], rng: random.Random, size: int = 3) -> Allocation:
    contenders = rng.sample(population, min(size, len(population)))
    return min(contenders, key=lambda s: s[0].fitness)[1]


def simulated_annealing(start: Allocation, ctx: SearchContext) -> Scored:
    """Metropolis acceptance with geometric cooling. Returns the best seen."""
    params = ctx.params
    current_eval, current = ctx.score(start)
    best_eval, best = current_eval, current

    t0 = max(params.anneal_initial_temperature, 1e-9)
    temperature = t0
    total = params.anneal_iterations

    for i in range(total):
        if ctx.expired():
            logger.info(f"Annealing stopped at deadline after {i} iterations")
            break

        step = params.anneal_step * max(0.2, temperature / t0)
        candidate = ctx.repair(perturb(current, ctx.rng, step))
        evaluation = ctx.fitness.evaluate(candidate)
        delta = evaluation.fitness - current_eval.fitness

        if delta <= 0 or ctx.rng.random() < math.exp(-delta / max(temperature, 1e-9)):
            current, current_eval = candidate, evaluation
            if evaluation.fitness < best_eval.fitness:
                best, best_eval = candidate, evaluation

        temperature *= params.anneal_cooling_rate
        ctx.report("annealing", i + 1, total)

    return best_eval, best


def genetic_search(seeds: list[Allocation], ctx: SearchContext) -> Scored:
    """Elitist genetic loop with tournament selection, blended crossover, mutation."""
    params = ctx.params
    size = max(params.ga_population, len(seeds), 2)
    elite = max(1, min(params.ga_elite, size - 1))

    members = list(seeds)
    while len(members) < size:
        parent = ctx.rng.choice(seeds)
        members.append(ctx.repair(mutate(parent, ctx.rng, 1.0, params.ga_mutation_step * 2)))

    population = sorted((ctx.score(m) for m in members), key=lambda s: s[0].fitness)
    total = params.ga_generations

    for generation in range(total):
        if ctx.expired():
            logger.info(f"Genetic loop stopped at deadline after {generation} generations")
            break

        offspring: list[Scored] = population[:elite]
        while len(offspring) < size:
            child = crossover(_tournament(population, ctx.rng), _tournament(population, ctx.rng), ctx.rng)
            child = mutate(child, ctx.rng, params.ga_mutation_rate, params.ga_mutation_step)
            offspring.append(ctx.score(ctx.repair(child)))

        population = sorted(offspring, key=lambda s: s[0].fitness)
        ctx.report("genetic", generation + 1, total)

    return population[0]


def local_search(start: Allocation, ctx: SearchContext) -> Scored:
    """Coordinate-wise hill climbing, coarse to fine, until no move improves."""
    best_eval, best = ctx.score(start)
    steps = ctx.params.local_search_steps
    slots = adjustable_slots()

    for step_index, step in enumerate(steps):
        for _ in range(ctx.params.local_search_max_passes):
            if ctx.expired():
                return best_eval, best
            improved = False
            for slot in slots:
                for delta in (step, -step):
                    candidate = ctx.repair(best.shifted(slot, delta))
                    evaluation = ctx.fitness.evaluate(candidate)
                    if evaluation.fitness < best_eval.fitness - 1e-9:
                        best, best_eval = candidate, evaluation
                        improved = True
            if not improved:
                break
        ctx.report("local_search", step_index + 1, len(steps))

    return best_eval, best
