# This module holds the money helpers shared by the synthesizer and the guardrail enforcer.
# All prices are Decimals so BLOCKED/OK outcomes near boundaries do not drift with binary floats.
# Rounding to cents is half-up, matching how operators read prices on the dashboard.

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")
# Upper bound for prices and costs accepted from hosts.
MAX_AMOUNT = Decimal("1000000000000")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("boolean values are not prices")
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 becomes Decimal("0.1") rather than its binary expansion.
        return Decimal(str(value))
    return Decimal(value)


def round2(value: Any) -> Decimal:
    amount = to_decimal(value)
    with localcontext() as ctx:
        # quantize needs every integer digit plus two decimals inside the context precision.
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def calc_margin_percent(cost: Any, price: Any) -> Decimal:
    """Margin as a percentage of price, rounded to cents; zero for non-positive prices."""

    price_d = to_decimal(price)
    if price_d <= 0:
        return ZERO
    return round2((price_d - to_decimal(cost)) / price_d * HUNDRED)


def calc_margin_value(cost: Any, price: Any) -> Decimal:
    return round2(to_decimal(price) - to_decimal(cost))


def calc_delta_percent(base: Any, other: Any) -> Decimal:
    base_d = to_decimal(base)
    if base_d <= 0:
        return ZERO
    return round2((to_decimal(other) - base_d) / base_d * HUNDRED)
