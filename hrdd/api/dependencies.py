"""
FastAPI Dependencies — Shared singletons injected via Depends().
"""

from __future__ import annotations

import logging
from functools import lru_cache

from hrdd.audit.logger import AuditLogger
from hrdd.config import settings
from hrdd.data.country_loader import CountryData, load_units_from_csv
from hrdd.engine.optimizer import AllocationOptimizer

logger = logging.getLogger("hrdd.api")


@lru_cache
def get_optimizer() -> AllocationOptimizer:
    """Shared optimizer singleton; owns the last-optimization cache."""
    return AllocationOptimizer()


@lru_cache
def get_audit_logger() -> AuditLogger:
    """Shared audit logger singleton."""
    return AuditLogger()


@lru_cache
def get_country_data() -> CountryData | None:
    """Country units from the configured CSV, or None when not configured."""
    if not settings.country_data_path:
        return None
    try:
        return load_units_from_csv(settings.country_data_path)
    except (OSError, ValueError):
        logger.exception(f"Could not load country data from {settings.country_data_path}")
        return None
