"""
Audit Logger — JSON-lines trail of optimizer runs.

One line per optimize call: timestamp, run id, state hash, outcome status,
portfolio size, budget, resulting cost and managed risk, search effort, and
duration. The trail can be filtered by status or by state hash and rolled up
into per-status counts.
"""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from pathlib import Path
from typing import Iterator

from hrdd.config import settings
from hrdd.models.optimizer_models import AuditEntry

logger = logging.getLogger("hrdd.audit")


class AuditLogger:
    """Append-only audit trail of optimizer runs."""

    def __init__(self, log_path: str | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)

    def log(self, entry: AuditEntry) -> None:
        """Append one run. Write failures are logged, never raised."""
        record = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **entry.model_dump(),
        }
        try:
            with open(self.log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write audit record for run {entry.run_id}: {e}")

    def _records(self) -> Iterator[dict]:
        if not self.log_path.exists():
            return
        try:
            with open(self.log_path) as f:
                lines = f.readlines()
        except OSError as e:
            logger.error(f"Failed to read audit log {self.log_path}: {e}")
            return

        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed audit line {number}")

    def read_recent(self, count: int = 50, status: str | None = None) -> list[dict]:
        """Most recent ``count`` runs, oldest first, optionally for one status."""
        records = [r for r in self._records() if status is None or r.get("status") == status]
        return records[-count:] if count > 0 else []

    def history(self, state_hash: str) -> list[dict]:
        """Every run recorded for one optimizer state."""
        return [r for r in self._records() if r.get("state_hash") == state_hash]

    def summary(self) -> dict:
        """Run counts per status and mean duration."""
        statuses: Counter[str] = Counter()
        total_ms = 0.0
        runs = 0
        for record in self._records():
            runs += 1
            statuses[record.get("status", "unknown")] += 1
            total_ms += float(record.get("duration_ms", 0.0))
        return {
            "runs": runs,
            "by_status": dict(statuses),
            "mean_duration_ms": round(total_ms / runs, 2) if runs else 0.0,
        }
