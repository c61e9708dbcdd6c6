# This file provides shared builders for pricing engine tests.
# It exists so events, SKU snapshots, and rules are created the same way across test modules.

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

from src.pricing_engine.events import PricingEvent, parse_event_input
from src.pricing_engine.rule_matcher import SkuSnapshot
from src.pricing_engine.rules import Rule

PRICING_POLICY_PATH = str(Path(__file__).resolve().parents[2] / "configs" / "pricing_policy.yaml")


def competitor_drop_event(*, sku_id: str = "SKU-1", new_price: str = "95", old_price: str = "110") -> PricingEvent:
    return parse_event_input(
        "COMPETITOR_PRICE_DROP",
        {
            "skuId": sku_id,
            "competitorId": "COMP-9",
            "oldPrice": old_price,
            "newPrice": new_price,
            "capturedAt": "2024-05-01T10:00:00+00:00",
        },
    )


def cost_increase_event(*, sku_id: str = "SKU-1", old_cost: str = "80", new_cost: str = "86") -> PricingEvent:
    return parse_event_input(
        "COST_INCREASE",
        {"skuId": sku_id, "oldCost": old_cost, "newCost": new_cost, "reason": "Supplier update"},
    )


def stock_low_event(*, sku_id: str = "SKU-1", available: int = 3, threshold: int = 10) -> PricingEvent:
    return parse_event_input(
        "STOCK_LOW",
        {"skuId": sku_id, "available": available, "threshold": threshold},
    )


def sku(*, sku_id: str = "SKU-1", cost: str = "80", current_price: str = "100") -> SkuSnapshot:
    return SkuSnapshot(id=sku_id, cost=Decimal(cost), current_price=Decimal(current_price))


def rule_payload(
    *,
    rule_id: str = "rule-1",
    name: str = "Match undercut",
    event_type: str = "COMPETITOR_PRICE_DROP",
    enabled: bool = True,
    condition: dict[str, Any] | None = None,
    action_type: str = "PRICE_MATCH",
) -> dict[str, Any]:
    return {
        "id": rule_id,
        "name": name,
        "eventType": event_type,
        "enabled": enabled,
        "condition": condition or {"op": "lt", "left": "payload.newPrice", "right": "sku.currentPrice"},
        "actionTemplate": {"type": action_type, "params": {}},
    }


def make_rule(**kwargs: Any) -> Rule:
    return Rule.model_validate(rule_payload(**kwargs))
