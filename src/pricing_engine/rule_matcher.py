# This module selects the rules that fire for an event.
# A rule fires when it is enabled, targets the event type, and its condition holds.
# Input order is creation order and is preserved, since operators review recommendations in that order.

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from src.pricing_engine.condition_evaluator import evaluate_condition
from src.pricing_engine.events import PricingEvent
from src.pricing_engine.pricing_math import MAX_AMOUNT, to_decimal
from src.pricing_engine.rules import Rule


@dataclass(frozen=True)
class SkuSnapshot:
    id: str
    cost: Decimal
    current_price: Decimal

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SkuSnapshot:
        sku_id = str(data.get("id") or "").strip()
        if not sku_id:
            raise ValueError("sku.id is required")
        raw_cost = data.get("cost")
        raw_price = data.get("currentPrice", data.get("current_price"))
        if raw_cost is None or raw_price is None:
            raise ValueError("sku.cost and sku.currentPrice are required")
        try:
            cost = to_decimal(raw_cost)
            current_price = to_decimal(raw_price)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError("sku.cost and sku.currentPrice must be numeric") from exc
        if not (cost.is_finite() and current_price.is_finite()):
            raise ValueError("sku.cost and sku.currentPrice must be finite")
        if cost <= 0 or current_price <= 0:
            raise ValueError("sku.cost and sku.currentPrice must be > 0")
        if cost > MAX_AMOUNT or current_price > MAX_AMOUNT:
            raise ValueError(f"sku.cost and sku.currentPrice must be <= {MAX_AMOUNT}")
        return cls(id=sku_id, cost=cost, current_price=current_price)

    def context_fields(self) -> dict[str, Any]:
        return {"currentPrice": self.current_price, "cost": self.cost}


def build_context(event: PricingEvent, sku: SkuSnapshot | None) -> dict[str, Any]:
    return {
        "payload": event.context_payload(),
        "sku": sku.context_fields() if sku is not None else None,
    }


def match_rules(event: PricingEvent, sku: SkuSnapshot | None, rules: Sequence[Rule]) -> list[Rule]:
    context = build_context(event, sku)
    return [
        rule
        for rule in rules
        if rule.enabled and rule.event_type == event.type and evaluate_condition(rule.condition, context)
    ]
