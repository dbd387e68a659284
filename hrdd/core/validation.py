"""
Configuration Validation — Explicit validity checks before computation.

Core calculators call the cheap ``is_valid_*`` predicates and degrade to a
neutral fallback on failure. Callers that hold raw user input run
``validate_strategy`` / ``validate_weights`` once and check ``valid``.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

from pydantic import ValidationError

from hrdd.config import settings
from hrdd.models.allocation_models import (
    RESPONSE_COUNT,
    TOOL_COUNT,
    ConfigError,
    StrategyConfig,
    StrategyValidation,
)
from hrdd.models.unit_models import INDICATOR_COUNT, WeightVector


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def is_valid_vector(
    values: Sequence[float] | None,
    length: int,
    upper: float = 100.0,
) -> bool:
    """True if ``values`` has ``length`` finite numbers within [0, upper]."""
    if values is None or len(values) != length:
        return False
    return all(_is_number(v) and 0 <= v <= upper for v in values)


def is_valid_weights(weights: Sequence[float] | None) -> bool:
    return is_valid_vector(weights, INDICATOR_COUNT, upper=settings.max_indicator_weight)


def is_valid_tool_vector(values: Sequence[float] | None) -> bool:
    return is_valid_vector(values, TOOL_COUNT)


def is_valid_response_vector(values: Sequence[float] | None) -> bool:
    return is_valid_vector(values, RESPONSE_COUNT)


def _errors_from(exc: ValidationError) -> list[ConfigError]:
    return [
        ConfigError(
            field=".".join(str(p) for p in err.get("loc", ())) or "config",
            message=err.get("msg", "invalid value"),
        )
        for err in exc.errors()
    ]


def validate_strategy(raw: dict[str, Any]) -> StrategyValidation:
    """
    Validate a raw strategy configuration.

    Returns:
        StrategyValidation with the parsed config when valid, otherwise the
        list of field errors. Never raises.
    """
    try:
        config = StrategyConfig.model_validate(raw)
    except ValidationError as e:
        return StrategyValidation(valid=False, errors=_errors_from(e))
    return StrategyValidation(valid=True, config=config)


def validate_weights(raw: Sequence[Any]) -> tuple[bool, list[ConfigError]]:
    """Validate an indicator weight vector. Returns (valid, errors)."""
    try:
        WeightVector(weights=list(raw))
    except ValidationError as e:
        return False, _errors_from(e)
    except TypeError:
        return False, [ConfigError(field="weights", message="weights must be a sequence")]
    return True, []
