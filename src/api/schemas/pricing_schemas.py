# This file defines request and response schemas for the pricing endpoints.
# It exists so recommendation and guardrail payloads are strongly typed and stable for hosts.
# Rules are accepted in their stored camelCase form; event payloads are validated per event type
# by the service so failures can be reported as INVALID_EVENT_PAYLOAD.

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field

from src.api.schemas.common import CamelModel, EnvelopeFields
from src.pricing_engine.events import EventType
from src.pricing_engine.pricing_math import MAX_AMOUNT
from src.pricing_engine.rules import Rule


class EventInputV1(CamelModel):
    type: EventType
    payload: dict[str, Any]


class SkuSnapshotV1(CamelModel):
    id: str = Field(min_length=1)
    cost: Decimal = Field(gt=0, le=MAX_AMOUNT)
    current_price: Decimal = Field(gt=0, le=MAX_AMOUNT)


class GuardrailPolicyOverrideV1(CamelModel):
    min_margin_pct: Decimal | None = None
    max_change_pct: Decimal | None = None
    rounding_mode: str | None = None


class RecommendationRequestV1(CamelModel):
    event: EventInputV1
    sku: SkuSnapshotV1
    rules: list[Rule] = Field(default_factory=list)
    policy: GuardrailPolicyOverrideV1 | None = None


class GuardrailCheckRequestV1(CamelModel):
    sku: SkuSnapshotV1
    suggested_price: Decimal = Field(le=MAX_AMOUNT)
    policy: GuardrailPolicyOverrideV1 | None = None


class GuardrailPolicyV1(CamelModel):
    min_margin_pct: Decimal
    max_change_pct: Decimal
    rounding_mode: str


class GuardrailResultV1(CamelModel):
    safety_status: str
    safety_reason: str | None = None
    suggested_price_original: Decimal
    suggested_price_final: Decimal
    adjusted: bool
    reasons: list[str]


class RecommendationV1(CamelModel):
    type: str
    title: str
    details: dict[str, Any]
    rule_id: str
    reason: str
    guardrail: GuardrailResultV1 | None = None

    recommended_price_action: str | None = None
    guardrail_note: str | None = None
    why_this_price: str | None = None


class RecommendationBatchV1(CamelModel):
    event_type: str
    sku_id: str
    pricing_policy_version: str
    policy: GuardrailPolicyV1
    recommendations: list[RecommendationV1]


class GuardrailCheckV1(CamelModel):
    sku_id: str
    pricing_policy_version: str
    policy: GuardrailPolicyV1
    guardrail: GuardrailResultV1

    recommended_price_action: str | None = None
    guardrail_note: str | None = None
    why_this_price: str | None = None


class RecommendationResponseV1(EnvelopeFields):
    data: RecommendationBatchV1


class GuardrailCheckResponseV1(EnvelopeFields):
    data: GuardrailCheckV1
