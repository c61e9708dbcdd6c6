# This module defines the business events that can trigger pricing recommendations.
# Each event type has its own strictly typed payload; hosts validate here before calling the engine.
# Wire keys are camelCase because stored rule conditions address them as `payload.newPrice` etc.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.pricing_engine.pricing_math import MAX_AMOUNT


class EventType(str, Enum):
    COMPETITOR_PRICE_DROP = "COMPETITOR_PRICE_DROP"
    COST_INCREASE = "COST_INCREASE"
    STOCK_LOW = "STOCK_LOW"


EVENT_TYPES: tuple[str, ...] = tuple(member.value for member in EventType)


class WireModel(BaseModel):
    """Base for models exchanged with hosts using camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CompetitorPriceDropPayload(WireModel):
    sku_id: str = Field(min_length=1)
    competitor_id: str = Field(min_length=1)
    old_price: Decimal = Field(gt=0, le=MAX_AMOUNT)
    new_price: Decimal = Field(gt=0, le=MAX_AMOUNT)
    captured_at: str | None = None

    @field_validator("captured_at")
    @classmethod
    def validate_captured_at(cls, value: str | None) -> str | None:
        if value is None:
            return value
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            raise ValueError("capturedAt must be timezone-aware ISO8601")
        return value


class CostIncreasePayload(WireModel):
    sku_id: str = Field(min_length=1)
    old_cost: Decimal = Field(gt=0, le=MAX_AMOUNT)
    new_cost: Decimal = Field(gt=0, le=MAX_AMOUNT)
    reason: str | None = Field(default=None, min_length=1)


class StockLowPayload(WireModel):
    sku_id: str = Field(min_length=1)
    available: Decimal = Field(ge=0)
    threshold: Decimal = Field(ge=0)


EventPayload = CompetitorPriceDropPayload | CostIncreasePayload | StockLowPayload

EVENT_PAYLOAD_MODELS: dict[EventType, type[WireModel]] = {
    EventType.COMPETITOR_PRICE_DROP: CompetitorPriceDropPayload,
    EventType.COST_INCREASE: CostIncreasePayload,
    EventType.STOCK_LOW: StockLowPayload,
}


@dataclass(frozen=True)
class PricingEvent:
    type: EventType
    payload: EventPayload

    @property
    def sku_id(self) -> str:
        return self.payload.sku_id

    def context_payload(self) -> dict[str, Any]:
        """Payload as the loosely typed map conditions and templates read from."""

        return self.payload.model_dump(by_alias=True)


def parse_event_input(event_type: EventType | str, payload: Any) -> PricingEvent:
    """Validate a raw payload against the schema of its event type.

    Raises `ValueError` for unknown event types and `pydantic.ValidationError`
    (itself a `ValueError`) for malformed payloads.
    """

    resolved_type = EventType(event_type)
    model = EVENT_PAYLOAD_MODELS[resolved_type]
    parsed = model.model_validate(payload)
    return PricingEvent(type=resolved_type, payload=parsed)  # type: ignore[arg-type]
