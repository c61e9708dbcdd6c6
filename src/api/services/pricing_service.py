# This file implements the pricing decision service behind the pricing endpoints.
# It exists so routers stay transport-focused while event validation, policy resolution, and row shaping live here.
# Engine failures map to structured API errors; a BLOCKED guardrail outcome is a normal result and is only counted.
# It also adds plain-language fields so operators can read a recommendation without the reason codes.

from __future__ import annotations

import logging
from typing import Any

from prometheus_client import Counter
from pydantic import ValidationError

from src.api.error_handlers import APIError
from src.api.plain_language import recommendation_plain_fields
from src.api.schemas.pricing_schemas import (
    GuardrailCheckRequestV1,
    GuardrailPolicyOverrideV1,
    RecommendationRequestV1,
    SkuSnapshotV1,
)
from src.pricing_engine.events import PricingEvent, parse_event_input
from src.pricing_engine.guardrail_enforcer import GuardrailPolicy, GuardrailResult
from src.pricing_engine.pricing_config import PricingConfig, resolve_guardrail_policy
from src.pricing_engine.recommendation_runner import (
    Recommendation,
    SkuMismatchError,
    ensure_sku_matches_event,
    evaluate_event,
    revalidate_price,
)
from src.pricing_engine.rule_matcher import SkuSnapshot

LOGGER = logging.getLogger("pricing_api")

PRICING_GUARDRAIL_OUTCOMES_TOTAL = Counter(
    "pricing_guardrail_outcomes_total",
    "Guardrail outcomes produced by the pricing API.",
    ["source", "safety_status"],
)
PRICING_RECOMMENDATIONS_TOTAL = Counter(
    "pricing_recommendations_total",
    "Suggested actions produced by the pricing API.",
    ["event_type", "action_type"],
)


class RecommendationService:
    """Stateless evaluation of pricing events and guardrail checks."""

    def __init__(self, *, pricing_config: PricingConfig) -> None:
        self.pricing_config = pricing_config

    def recommend(
        self,
        request: RecommendationRequestV1,
        *,
        include_plain_language_fields: bool,
    ) -> dict[str, Any]:
        event = self._parse_event(request)
        sku = self._snapshot(request.sku)
        try:
            ensure_sku_matches_event(event, sku)
        except SkuMismatchError as exc:
            raise APIError(
                status_code=400,
                error_code="SKU_MISMATCH",
                message=str(exc),
                details={"event_sku_id": exc.event_sku_id, "snapshot_sku_id": exc.snapshot_sku_id},
            ) from exc

        policy = self._policy(request.policy)
        recommendations = evaluate_event(
            event,
            sku,
            request.rules,
            policy,
            currency_label=self.pricing_config.currency_label,
        )

        rows = [
            self._recommendation_row(
                recommendation,
                sku=sku,
                include_plain_language_fields=include_plain_language_fields,
            )
            for recommendation in recommendations
        ]
        for recommendation in recommendations:
            PRICING_RECOMMENDATIONS_TOTAL.labels(
                event_type=event.type.value,
                action_type=recommendation.action.type.value,
            ).inc()
            if recommendation.guardrail is not None:
                self._record_outcome("recommendation", recommendation.guardrail, sku_id=sku.id)

        LOGGER.info(
            "evaluated event_type=%s sku_id=%s rules=%s recommendations=%s",
            event.type.value,
            sku.id,
            len(request.rules),
            len(rows),
        )
        return {
            "event_type": event.type.value,
            "sku_id": sku.id,
            "pricing_policy_version": self.pricing_config.pricing_policy_version,
            "policy": policy.to_dict(),
            "recommendations": rows,
        }

    def check_guardrails(
        self,
        request: GuardrailCheckRequestV1,
        *,
        include_plain_language_fields: bool,
    ) -> dict[str, Any]:
        sku = self._snapshot(request.sku)
        policy = self._policy(request.policy)
        result = revalidate_price(sku, request.suggested_price, policy)
        self._record_outcome("guardrail_check", result, sku_id=sku.id)

        payload: dict[str, Any] = {
            "sku_id": sku.id,
            "pricing_policy_version": self.pricing_config.pricing_policy_version,
            "policy": policy.to_dict(),
            "guardrail": result.to_dict(),
        }
        if include_plain_language_fields:
            payload.update(
                recommendation_plain_fields(guardrail=result, cost=sku.cost, current_price=sku.current_price)
            )
        return payload

    def _parse_event(self, request: RecommendationRequestV1) -> PricingEvent:
        try:
            return parse_event_input(request.event.type, request.event.payload)
        except ValidationError as exc:
            raise APIError(
                status_code=422,
                error_code="INVALID_EVENT_PAYLOAD",
                message=f"Payload does not match the {request.event.type.value} event schema.",
                details=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

    def _policy(self, overrides: GuardrailPolicyOverrideV1 | None) -> GuardrailPolicy:
        raw = overrides.model_dump(by_alias=True, exclude_none=True) if overrides is not None else None
        try:
            return resolve_guardrail_policy(self.pricing_config, raw)
        except ValueError as exc:
            raise APIError(
                status_code=422,
                error_code="VALIDATION_ERROR",
                message=str(exc),
            ) from exc

    @staticmethod
    def _snapshot(sku: SkuSnapshotV1) -> SkuSnapshot:
        return SkuSnapshot(id=sku.id, cost=sku.cost, current_price=sku.current_price)

    @staticmethod
    def _record_outcome(source: str, result: GuardrailResult, *, sku_id: str) -> None:
        PRICING_GUARDRAIL_OUTCOMES_TOTAL.labels(source=source, safety_status=result.safety_status.value).inc()
        if result.blocked:
            LOGGER.info("guardrail blocked sku_id=%s reason=%s", sku_id, result.safety_reason)

    @staticmethod
    def _recommendation_row(
        recommendation: Recommendation,
        *,
        sku: SkuSnapshot,
        include_plain_language_fields: bool,
    ) -> dict[str, Any]:
        row = recommendation.to_dict()
        if include_plain_language_fields:
            row.update(
                recommendation_plain_fields(
                    guardrail=recommendation.guardrail,
                    cost=sku.cost,
                    current_price=sku.current_price,
                )
            )
        return row
