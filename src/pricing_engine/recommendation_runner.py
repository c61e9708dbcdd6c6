# This module ties the rule engine and the guardrail enforcer together for one event.
# Matched rules become suggested actions in rule order; price actions also get a guardrail result.
# Nothing here is persisted or logged; callers store recommendations and may re-validate prices later.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.pricing_engine.action_synthesizer import DEFAULT_CURRENCY_LABEL, SuggestedAction, build_action
from src.pricing_engine.events import PricingEvent
from src.pricing_engine.guardrail_enforcer import GuardrailPolicy, GuardrailResult, enforce_guardrails
from src.pricing_engine.rule_matcher import SkuSnapshot, match_rules
from src.pricing_engine.rules import PRICE_ACTION_TYPES, Rule


class SkuMismatchError(ValueError):
    """Raised when an event targets a different SKU than the snapshot supplied with it."""

    def __init__(self, *, event_sku_id: str, snapshot_sku_id: str) -> None:
        self.event_sku_id = event_sku_id
        self.snapshot_sku_id = snapshot_sku_id
        super().__init__(f"skuId mismatch between event ({event_sku_id!r}) and snapshot ({snapshot_sku_id!r})")


@dataclass(frozen=True)
class Recommendation:
    action: SuggestedAction
    guardrail: GuardrailResult | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = self.action.to_dict()
        payload["guardrail"] = self.guardrail.to_dict() if self.guardrail is not None else None
        return payload


def ensure_sku_matches_event(event: PricingEvent, sku: SkuSnapshot) -> None:
    if event.sku_id != sku.id:
        raise SkuMismatchError(event_sku_id=event.sku_id, snapshot_sku_id=sku.id)


def run_rules(
    event: PricingEvent,
    sku: SkuSnapshot | None,
    rules: Sequence[Rule],
    *,
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> list[SuggestedAction]:
    return [
        build_action(rule, event, sku, currency_label=currency_label)
        for rule in match_rules(event, sku, rules)
    ]


def revalidate_price(sku: SkuSnapshot, price: Decimal, policy: GuardrailPolicy | None = None) -> GuardrailResult:
    """Run the guardrails alone, e.g. for a manually entered price or an execution-time re-check."""

    return enforce_guardrails(
        cost=sku.cost,
        current_price=sku.current_price,
        suggested_price=price,
        policy=policy,
    )


def evaluate_event(
    event: PricingEvent,
    sku: SkuSnapshot,
    rules: Sequence[Rule],
    policy: GuardrailPolicy | None = None,
    *,
    currency_label: str = DEFAULT_CURRENCY_LABEL,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    for action in run_rules(event, sku, rules, currency_label=currency_label):
        if action.type not in PRICE_ACTION_TYPES:
            recommendations.append(Recommendation(action=action))
            continue

        suggested = action.suggested_price
        raw_price = suggested if suggested is not None else sku.current_price
        recommendations.append(Recommendation(action=action, guardrail=revalidate_price(sku, raw_price, policy)))
    return recommendations
