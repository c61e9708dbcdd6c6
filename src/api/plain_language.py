# This file translates recommendation and guardrail outputs into plain-language summaries.
# It exists so operator dashboards can show one sentence next to each price without re-deriving it.
# The wording is deterministic and tied directly to price deltas, margins, and guardrail reasons.
# Keeping this logic in one module prevents contradictory wording across endpoints.

from __future__ import annotations

from decimal import Decimal
from typing import Any

from src.pricing_engine.guardrail_enforcer import GuardrailResult
from src.pricing_engine.pricing_math import calc_delta_percent, calc_margin_percent


def price_action_label(current_price: Decimal, final_price: Decimal) -> str:
    """Map the percent change from the current price to deterministic labels."""

    delta = calc_delta_percent(current_price, final_price)
    if delta < 0:
        return "Price decrease"
    if delta == 0:
        return "No price change"
    if delta <= 5:
        return "Small increase"
    if delta <= 15:
        return "Moderate increase"
    return "Larger increase"


def guardrail_note(result: GuardrailResult) -> str:
    """Describe guardrail effects in plain language."""

    if result.blocked:
        return f"No safe price was found: {result.safety_reason}."
    if result.adjusted:
        return "Guardrails adjusted the price: " + "; ".join(result.reasons) + "."
    return "The suggested price already satisfied every guardrail."


def why_this_price(*, result: GuardrailResult, cost: Decimal, current_price: Decimal) -> str:
    final_price = result.suggested_price_final
    delta = calc_delta_percent(current_price, final_price)
    margin = calc_margin_percent(cost, final_price)
    if result.blocked:
        return f"Price left for manual review; the closest candidate {final_price:.2f} breaks a guardrail."
    return f"Price {final_price:.2f} changes the current price by {delta}% and keeps a {margin}% margin."


def recommendation_plain_fields(
    *,
    guardrail: GuardrailResult | None,
    cost: Decimal,
    current_price: Decimal,
) -> dict[str, Any]:
    """Return plain-language fields for one recommendation; non-price actions get none."""

    if guardrail is None:
        return {
            "recommended_price_action": None,
            "guardrail_note": None,
            "why_this_price": None,
        }
    return {
        "recommended_price_action": price_action_label(current_price, guardrail.suggested_price_final),
        "guardrail_note": guardrail_note(guardrail),
        "why_this_price": why_this_price(result=guardrail, cost=cost, current_price=current_price),
    }
