"""
HRDD — Optimizer endpoints.

  POST /optimize          → budget-constrained allocation search
  GET  /optimize/history  → recent runs from the audit trail

The search runs in a worker thread and every call writes one audit record.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from hrdd.api.dependencies import get_audit_logger, get_optimizer
from hrdd.audit.logger import AuditLogger
from hrdd.engine.optimizer import AllocationOptimizer
from hrdd.models.optimizer_models import AuditEntry, OptimizationRequest, OptimizationResult

logger = logging.getLogger("hrdd.api.optimize")
router = APIRouter()


@router.post("/optimize", response_model=OptimizationResult)
async def optimize(
    req: OptimizationRequest,
    optimizer: AllocationOptimizer = Depends(get_optimizer),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Search for a lower-risk allocation inside the target budget."""
    # CPU-bound search; keep the event loop free
    result = await asyncio.to_thread(optimizer.optimize, req)

    audit.log(
        AuditEntry(
            run_id=result.run_id,
            state_hash=result.state_hash,
            status=result.status.value,
            units=len(req.entries),
            target_budget=req.target_budget,
            cost=result.cost,
            managed_risk=result.managed_risk,
            risk_reduction=result.risk_reduction,
            attempts=result.attempts,
            evaluations=result.evaluations,
            duration_ms=result.duration_ms,
        )
    )
    return result


@router.get("/optimize/history")
async def optimize_history(
    count: int = Query(default=20, ge=1, le=500),
    status: str | None = None,
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Recent optimizer runs from the audit trail, with per-status counts."""
    return {
        "runs": audit.read_recent(count, status=status),
        "summary": audit.summary(),
    }
