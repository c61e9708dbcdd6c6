# This test file validates per-event-type payload validation.

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.pricing_engine.events import (
    CompetitorPriceDropPayload,
    EventType,
    parse_event_input,
)


def test_competitor_price_drop_payload_is_parsed() -> None:
    event = parse_event_input(
        "COMPETITOR_PRICE_DROP",
        {
            "skuId": "SKU-1",
            "competitorId": "C-1",
            "oldPrice": 110,
            "newPrice": "95.5",
            "capturedAt": "2024-05-01T10:00:00Z",
        },
    )

    assert event.type == EventType.COMPETITOR_PRICE_DROP
    assert isinstance(event.payload, CompetitorPriceDropPayload)
    assert event.sku_id == "SKU-1"
    assert event.context_payload()["newPrice"] == Decimal("95.5")
    assert event.context_payload()["competitorId"] == "C-1"


def test_stock_low_allows_zero_counts() -> None:
    event = parse_event_input(EventType.STOCK_LOW, {"skuId": "SKU-1", "available": 0, "threshold": 0})

    assert event.context_payload() == {"skuId": "SKU-1", "available": Decimal("0"), "threshold": Decimal("0")}


@pytest.mark.parametrize(
    ("event_type", "payload"),
    [
        ("COMPETITOR_PRICE_DROP", {"skuId": "SKU-1", "competitorId": "C-1", "oldPrice": 110, "newPrice": 0}),
        ("COMPETITOR_PRICE_DROP", {"skuId": "", "competitorId": "C-1", "oldPrice": 110, "newPrice": 90}),
        (
            "COMPETITOR_PRICE_DROP",
            {"skuId": "SKU-1", "competitorId": "C-1", "oldPrice": 110, "newPrice": 90, "capturedAt": "2024-05-01T10:00:00"},
        ),
        ("COMPETITOR_PRICE_DROP", {"skuId": "SKU-1", "competitorId": "C-1", "oldPrice": "1e30", "newPrice": 90}),
        ("COST_INCREASE", {"skuId": "SKU-1", "oldCost": 10}),
        ("COST_INCREASE", {"skuId": "SKU-1", "oldCost": 10, "newCost": "Infinity"}),
        ("COST_INCREASE", {"skuId": "SKU-1", "oldCost": 10, "newCost": 12, "reason": ""}),
        ("STOCK_LOW", {"skuId": "SKU-1", "available": -1, "threshold": 5}),
        ("STOCK_LOW", {"skuId": "SKU-1", "available": "many", "threshold": 5}),
    ],
)
def test_invalid_payloads_raise_validation_error(event_type: str, payload: dict) -> None:
    with pytest.raises(ValidationError):
        parse_event_input(event_type, payload)


def test_unknown_event_type_raises_value_error() -> None:
    with pytest.raises(ValueError):
        parse_event_input("PRICE_SURGE", {"skuId": "SKU-1"})
