"""Numeric coercion helpers shared by the ledger and valuation code."""

from __future__ import annotations

import math
from typing import Any


def coerce_numeric(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default`` when it is not one.

    Accepts ints, floats, numeric strings (``"1,5"`` is read as ``1.5``) and
    anything ``float()`` understands. ``None``, NaN, infinities, booleans and
    unparseable values collapse to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return default
        value = text
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def safe_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_percent(numerator: float, denominator: float) -> float:
    """``numerator / denominator * 100`` for a positive denominator, else 0."""
    if denominator <= 0:
        return 0.0
    return safe_ratio(numerator, denominator) * 100.0


def optional_numeric(value: Any) -> float | None:
    """Like :func:`coerce_numeric` but returns ``None`` for missing or invalid input."""
    number = coerce_numeric(value, default=math.nan)
    return None if math.isnan(number) else number
