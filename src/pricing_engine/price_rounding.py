# This module implements the workspace rounding modes applied to guardrailed prices.
# Nearest rounding is half-up; the directed variants are used to repair prices pushed out of bounds.

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from src.pricing_engine.pricing_math import round2, to_decimal


class RoundingMode(str, Enum):
    NONE = "NONE"
    NEAREST_1 = "NEAREST_1"
    NEAREST_5 = "NEAREST_5"
    NEAREST_10 = "NEAREST_10"


ROUNDING_MODE_VALUES = frozenset(mode.value for mode in RoundingMode)

ROUNDING_STEPS: dict[RoundingMode, Decimal] = {
    RoundingMode.NEAREST_1: Decimal("1"),
    RoundingMode.NEAREST_5: Decimal("5"),
    RoundingMode.NEAREST_10: Decimal("10"),
}


def parse_rounding_mode(value: Any, default: RoundingMode = RoundingMode.NEAREST_1) -> RoundingMode:
    """Map a stored setting onto a rounding mode; anything but an exact mode name falls back."""

    if isinstance(value, str) and value in ROUNDING_MODE_VALUES:
        return RoundingMode(value)
    return default


def _snap(price: Any, mode: RoundingMode, rounding: str) -> Decimal:
    if mode == RoundingMode.NONE:
        return round2(price)
    step = ROUNDING_STEPS[mode]
    return round2((to_decimal(price) / step).to_integral_value(rounding=rounding) * step)


def apply_rounding(price: Any, mode: RoundingMode) -> Decimal:
    return _snap(price, mode, ROUND_HALF_UP)


def round_up_to_mode(price: Any, mode: RoundingMode) -> Decimal:
    return _snap(price, mode, ROUND_CEILING)


def round_down_to_mode(price: Any, mode: RoundingMode) -> Decimal:
    return _snap(price, mode, ROUND_FLOOR)
