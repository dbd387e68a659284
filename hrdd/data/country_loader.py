"""
Country Data Loader — Read unit indicator rows from a local CSV file.

Expected columns (header row required):
    name, iso_code, ituc, corruption, migrant, wjp, walkfree, base_risk
Later rows with a duplicate ISO code replace earlier ones and are reported.
"""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path

from pydantic import BaseModel, ValidationError

from hrdd.models.unit_models import Unit

logger = logging.getLogger("hrdd.data")

EXPECTED_COLUMN_COUNT = 8


class DuplicateUnit(BaseModel):
    code: str
    replaced: str
    replaced_with: str


class CountryData(BaseModel):
    units: list[Unit]
    duplicates: list[DuplicateUnit]


def _clean(value: str) -> str:
    return value.replace("\x00", "").strip().strip('"').strip()


def _to_number(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) and number >= 0 else 0.0


def load_units_from_csv(path: str | Path) -> CountryData:
    """
    Load units from a CSV file.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: The file is empty, a row has the wrong column count,
            or a row has no ISO code.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Country data file not found at {file_path}")

    with open(file_path, newline="", encoding="utf-8") as f:
        rows = [[_clean(cell) for cell in row] for row in csv.reader(f)]
    rows = [row for row in rows if any(row)]

    if not rows:
        raise ValueError("Country data file is empty")

    header = rows[0]
    if len(header) != EXPECTED_COLUMN_COUNT:
        raise ValueError(
            f"Unexpected number of columns in header. Expected {EXPECTED_COLUMN_COUNT}, "
            f"received {len(header)}"
        )

    by_code: dict[str, Unit] = {}
    duplicates: list[DuplicateUnit] = []

    for line_number, row in enumerate(rows[1:], start=2):
        if len(row) != EXPECTED_COLUMN_COUNT:
            raise ValueError(
                f"Unexpected number of columns on line {line_number}. "
                f"Expected {EXPECTED_COLUMN_COUNT}, received {len(row)}"
            )

        name, code, *indicators, base_risk = row
        if not code:
            raise ValueError(f"Missing ISO code on line {line_number}")

        try:
            unit = Unit(
                code=code,
                name=name,
                indicators=tuple(_to_number(v) for v in indicators),
                base_risk_score=_to_number(base_risk),
            )
        except ValidationError as e:
            raise ValueError(f"Invalid row on line {line_number}: {e}") from e

        if code in by_code:
            duplicates.append(
                DuplicateUnit(code=code, replaced=by_code[code].name, replaced_with=name)
            )
        by_code[code] = unit

    if duplicates:
        logger.warning(f"{len(duplicates)} duplicate ISO codes in {file_path.name}")
    logger.info(f"Loaded {len(by_code)} units from {file_path}")

    return CountryData(units=list(by_code.values()), duplicates=duplicates)
