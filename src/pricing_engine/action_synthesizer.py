# This module turns each matched rule into a candidate action for operators to review.
# Price actions carry a raw suggested price; the guardrail enforcer decides the final one later.
# A price match never recommends moving upward, and a cost increase passes the cost delta through 1:1.

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from src.pricing_engine.events import PricingEvent
from src.pricing_engine.pricing_math import ZERO, round2, to_decimal
from src.pricing_engine.rule_matcher import SkuSnapshot
from src.pricing_engine.rules import ActionType, Rule

DEFAULT_CURRENCY_LABEL = "Rs"


@dataclass(frozen=True)
class SuggestedAction:
    type: ActionType
    title: str
    rule_id: str
    reason: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def suggested_price(self) -> Decimal | None:
        value = self.details.get("suggestedPrice")
        return to_decimal(value) if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "details": dict(self.details),
            "ruleId": self.rule_id,
            "reason": self.reason,
        }


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _price_match(rule: Rule, payload: Mapping[str, Any], sku: SkuSnapshot | None, currency: str) -> SuggestedAction:
    current_price = sku.current_price if sku is not None else None
    new_price = to_decimal(_first_present(payload.get("newPrice"), current_price, ZERO))
    suggested_price = round2(min(new_price, current_price if current_price is not None else new_price))
    return SuggestedAction(
        type=ActionType.PRICE_MATCH,
        title=f"Match competitor price to {currency} {suggested_price:.2f}",
        rule_id=rule.id,
        reason=rule.name,
        details={
            "suggestedPrice": suggested_price,
            "reason": "Competitor undercut",
            "competitorId": payload.get("competitorId"),
            "oldPrice": payload.get("oldPrice"),
            "newPrice": payload.get("newPrice"),
        },
    )


def _price_increase(rule: Rule, payload: Mapping[str, Any], sku: SkuSnapshot | None, currency: str) -> SuggestedAction:
    old_cost = to_decimal(_first_present(payload.get("oldCost"), sku.cost if sku is not None else None, ZERO))
    new_cost = to_decimal(_first_present(payload.get("newCost"), old_cost))
    delta_cost = round2(new_cost - old_cost)
    current_price = sku.current_price if sku is not None else ZERO
    suggested_price = round2(current_price + delta_cost)
    return SuggestedAction(
        type=ActionType.PRICE_INCREASE,
        title=f"Increase price to protect margin: {currency} {suggested_price:.2f}",
        rule_id=rule.id,
        reason=rule.name,
        details={
            "suggestedPrice": suggested_price,
            "deltaCost": delta_cost,
            "oldCost": old_cost,
            "newCost": new_cost,
        },
    )


def _notify(rule: Rule, payload: Mapping[str, Any]) -> SuggestedAction:
    return SuggestedAction(
        type=ActionType.NOTIFY,
        title="Low stock alert",
        rule_id=rule.id,
        reason=rule.name,
        details={
            "available": payload.get("available"),
            "threshold": payload.get("threshold"),
        },
    )


def build_action(
    rule: Rule,
    event: PricingEvent,
    sku: SkuSnapshot | None,
    *,
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> SuggestedAction:
    payload = event.context_payload()
    action_type = rule.action_template.type

    if action_type == ActionType.PRICE_MATCH:
        return _price_match(rule, payload, sku, currency_label)
    if action_type == ActionType.PRICE_INCREASE:
        return _price_increase(rule, payload, sku, currency_label)
    return _notify(rule, payload)
