"""
Focus Bias Function — Bounded, monotone multiplier from focus and risk ratio.

Used by the coverage distributor and the managed-risk calculator. The
exponent rises quickly up to the focus midpoint and slowly after it, and two
continuous compression passes keep a handful of high-risk units from
absorbing most of the capacity as focus approaches 1.
"""

from __future__ import annotations

import math

from hrdd.config import settings


def clamp_focus(focus: float) -> float:
    """Sanitize focus to [0, 1]; non-finite input becomes 0."""
    if not isinstance(focus, (int, float)) or not math.isfinite(focus):
        return 0.0
    return max(0.0, min(1.0, float(focus)))


def focus_exponent(focus: float) -> float:
    """
    Piecewise-linear exponent in [min, max].

    focus 0   → focus_exponent_min (1.0)
    midpoint  → focus_exponent_mid (1.6)
    focus 1   → focus_exponent_max (2.0)
    """
    f = clamp_focus(focus)
    lo = settings.focus_exponent_min
    mid = settings.focus_exponent_mid
    hi = settings.focus_exponent_max
    midpoint = settings.focus_midpoint

    if f <= midpoint:
        exponent = lo + (mid - lo) * (f / midpoint)
    else:
        exponent = mid + (hi - mid) * ((f - midpoint) / (1.0 - midpoint))
    return max(lo, min(hi, exponent))


def biased_ratio(risk_ratio: float, focus: float) -> float:
    """
    Map a unit's risk ratio (unit risk / baseline) to a biased ratio.

    Non-decreasing in risk_ratio for a fixed focus, and non-decreasing in
    focus for any risk_ratio > 1.
    """
    f = clamp_focus(focus)
    if not isinstance(risk_ratio, (int, float)) or not math.isfinite(risk_ratio):
        risk_ratio = 1.0
    ratio = max(settings.focus_min_ratio, min(settings.focus_max_ratio, float(risk_ratio)))
    exponent = focus_exponent(f)

    pivot = settings.low_ratio_pivot
    if ratio < pivot:
        # Flatter curve below the pivot, matching the plain power at the pivot
        biased = (pivot ** exponent) * (ratio / pivot) ** (exponent * settings.low_ratio_compression)
    else:
        biased = ratio ** exponent

    threshold = settings.extreme_ratio_threshold
    focus_start = settings.extreme_focus_threshold
    if biased > threshold and f > focus_start:
        strength = min(1.0, (f - focus_start) / (1.0 - focus_start))
        k = 1.0 - strength * (1.0 - settings.extreme_ratio_compression)
        biased = threshold * (biased / threshold) ** k

    return biased


def portfolio_focus_multiplier(focus: float, concentration: float) -> float:
    """(1 − focus) + focus × K, with K sanitized to ≥ 1."""
    f = clamp_focus(focus)
    k = concentration if isinstance(concentration, (int, float)) and math.isfinite(concentration) else 1.0
    k = max(1.0, k)
    return (1.0 - f) + f * k
