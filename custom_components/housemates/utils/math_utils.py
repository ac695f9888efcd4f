# File: utils/math_utils.py
"""Math and calculation utilities for Housemates.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.

Functions:
    - round_currency: Round to the nearest cent
    - coerce_points: Finite numeric points, or zero
    - split_evenly: Divide an amount into cent shares that reconcile exactly
"""

from __future__ import annotations

import math
from typing import Any

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

CURRENCY_PRECISION = 2

# ==============================================================================
# Rounding / Coercion
# ==============================================================================

def round_currency(value: float, precision: int = CURRENCY_PRECISION) -> float:
    """Round a currency value to the nearest cent.

    Exact half cents round to even, as the builtin round does.

    Examples:
        round_currency(10.456) → 10.46
        round_currency(-3.3333) → -3.33
        round_currency(0.125) → 0.12
    """
    return round(value, precision)

def coerce_points(value: Any) -> float:
    """Return value as a finite float, or 0.0 when it is missing or malformed.

    Examples:
        coerce_points(5) → 5.0
        coerce_points("7") → 7.0
        coerce_points(float("nan")) → 0.0
        coerce_points(None) → 0.0
    """
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


# ==============================================================================
# Currency Distribution
# ==============================================================================

def split_evenly(amount: float, parts: int) -> list[float]:
    """Split amount into `parts` cent-rounded shares that sum back to amount.

    Remainder cents go to the first shares, so the result is deterministic
    for a given member ordering.

    Examples:
        split_evenly(10, 3) → [3.34, 3.33, 3.33]
        split_evenly(60, 3) → [20.0, 20.0, 20.0]
        split_evenly(5, 0) → []
    """
    if parts <= 0:
        return []
    total_cents = round(amount * 10**CURRENCY_PRECISION)
    base, remainder = divmod(total_cents, parts)
    return [
        (base + (1 if index < remainder else 0)) / 10**CURRENCY_PRECISION
        for index in range(parts)
    ]
