"""
Optimization Cache — SHA-256 state hashing with a single-slot result cache.

The state hash covers every optimizer input in a normalized, order-independent
form, so a repeated request can return the previous result without searching.
The context hash leaves out the allocation being optimized and the budget
window; two results sharing it are comparable by cost and risk.
"""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass, field
from typing import Any

from hrdd.models.optimizer_models import OptimizationRequest, OptimizationResult

_PRECISION = 6


def _round(values: list[float]) -> list[float]:
    return [round(float(v), _PRECISION) for v in values]


def _context_payload(request: OptimizationRequest) -> dict[str, Any]:
    strategy = request.strategy
    costs = request.costs
    entries = sorted(request.entries, key=lambda e: e.code)
    return {
        "entries": [
            [e.code, round(e.volume, _PRECISION), round(e.risk, _PRECISION)]
            for e in entries
        ],
        "tool_effectiveness": _round(strategy.tool_effectiveness),
        "response_effectiveness": _round(strategy.response_effectiveness),
        "focus": round(strategy.focus, _PRECISION),
        "costs": {
            "tool_annual_cost": _round(costs.tool_annual_cost),
            "tool_per_unit_cost": _round(costs.tool_per_unit_cost),
            "tool_hours_per_unit": _round(costs.tool_hours_per_unit),
            "response_hours_per_unit": _round(costs.response_hours_per_unit),
            "hourly_rate": round(costs.hourly_rate, _PRECISION),
            "unit_count": costs.unit_count,
        },
    }


def _digest(payload: dict[str, Any]) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass
class CacheEntry:
    """The last optimization result and the hashes it was computed for."""

    state_hash: str
    context_hash: str
    result: OptimizationResult
    aliases: set[str] = field(default_factory=set)
    timestamp: float = field(default_factory=time.time)

    def matches(self, state_hash: str) -> bool:
        return state_hash == self.state_hash or state_hash in self.aliases


class OptimizationCache:
    """
    Single-slot cache of the most recent optimization.

    Owned by one AllocationOptimizer; the owner serializes access.
    """

    def __init__(self) -> None:
        self._entry: CacheEntry | None = None

    @staticmethod
    def hash_context(request: OptimizationRequest) -> str:
        """Hash of the inputs that make two results comparable."""
        return _digest(_context_payload(request))

    @staticmethod
    def hash_state(request: OptimizationRequest, tolerance: float | None = None) -> str:
        """Hash of every optimizer input."""
        payload = _context_payload(request)
        payload["tool_coverage"] = _round(request.strategy.tool_coverage)
        payload["response_allocation"] = _round(request.strategy.response_allocation)
        payload["target_budget"] = round(request.target_budget, _PRECISION)
        tol = request.tolerance if tolerance is None else tolerance
        payload["tolerance"] = None if tol is None else round(tol, _PRECISION)
        return _digest(payload)

    def get(self, state_hash: str) -> CacheEntry | None:
        """
        Return the cached entry only if it was computed for this exact state,
        or for the state reached by applying its own result.
        """
        if self._entry is None or not self._entry.matches(state_hash):
            return None
        return self._entry

    @property
    def latest(self) -> CacheEntry | None:
        return self._entry

    def put(
        self,
        state_hash: str,
        context_hash: str,
        result: OptimizationResult,
        aliases: list[str] | None = None,
    ) -> None:
        self._entry = CacheEntry(
            state_hash=state_hash,
            context_hash=context_hash,
            result=result,
            aliases=set(aliases or ()),
        )

    def clear(self) -> None:
        self._entry = None

    @property
    def size(self) -> int:
        return 0 if self._entry is None else 1

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        if self._entry is None:
            return {"cached": False}
        return {
            "cached": True,
            "state_hash": self._entry.state_hash,
            "status": self._entry.result.status.value,
            "age_seconds": round(time.time() - self._entry.timestamp, 2),
        }
