"""
Health Check Route — GET /health

Reports engine version, whether country data is loaded, and the state of the
optimizer's last-result cache.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hrdd.api.dependencies import get_country_data, get_optimizer
from hrdd.data.country_loader import CountryData
from hrdd.engine.optimizer import AllocationOptimizer

router = APIRouter()


@router.get("/health")
async def health(
    optimizer: AllocationOptimizer = Depends(get_optimizer),
    data: CountryData | None = Depends(get_country_data),
):
    return {
        "status": "ok",
        "version": "1.0.0",
        "engine": "rank-preserving",
        "units_loaded": 0 if data is None else len(data.units),
        "optimizer_cache": optimizer.cache.stats(),
    }
