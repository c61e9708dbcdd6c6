# This file tests the pricing recommendation and guardrail check endpoints.
# It exists to validate request validation, error mapping, and the response contract hosts persist.
# The real recommendation service runs against the default policy, so guardrail math is exercised end to end.

from __future__ import annotations

from decimal import Decimal
from typing import Any

from tests.api.support import api_test_client, build_test_config, recommendation_body


def _dec(value: Any) -> Decimal:
    return Decimal(str(value))


def test_recommendations_endpoint_returns_guardrailed_price_match() -> None:
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=recommendation_body())

    assert response.status_code == 200
    payload = response.json()
    assert payload["api_version"] == "v1"
    assert payload["schema_version"] == "1.0.0"
    assert payload["request_id"]
    assert payload["warnings"] is None

    data = payload["data"]
    assert data["eventType"] == "COMPETITOR_PRICE_DROP"
    assert data["skuId"] == "SKU-1"
    assert data["pricingPolicyVersion"] == "pe1"
    assert data["policy"]["roundingMode"] == "NEAREST_1"
    assert len(data["recommendations"]) == 1

    recommendation = data["recommendations"][0]
    assert recommendation["type"] == "PRICE_MATCH"
    assert recommendation["ruleId"] == "match"
    assert recommendation["reason"] == "Match undercut"
    assert recommendation["title"] == "Match competitor price to Rs 95.00"
    assert _dec(recommendation["details"]["suggestedPrice"]) == Decimal("95")
    assert recommendation["guardrail"]["safetyStatus"] == "OK"
    assert recommendation["guardrail"]["safetyReason"] is None
    assert _dec(recommendation["guardrail"]["suggestedPriceFinal"]) == Decimal("95")
    assert recommendation["guardrail"]["adjusted"] is False
    assert recommendation["guardrail"]["reasons"] == []
    assert recommendation["recommendedPriceAction"] == "Price decrease"
    assert recommendation["guardrailNote"] == "The suggested price already satisfied every guardrail."


def test_recommendations_endpoint_returns_blocked_result_with_200() -> None:
    body = recommendation_body(
        new_price=80,
        cost=100,
        current_price=105,
        policy={"minMarginPct": 40, "maxChangePct": 5},
    )
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=body)

    assert response.status_code == 200
    data = response.json()["data"]
    assert _dec(data["policy"]["minMarginPct"]) == Decimal("40")
    guardrail = data["recommendations"][0]["guardrail"]
    assert guardrail["safetyStatus"] == "BLOCKED"
    assert guardrail["safetyReason"] == "Cannot satisfy margin within max price change guardrail"
    assert _dec(guardrail["suggestedPriceFinal"]) == Decimal("166.67")
    assert guardrail["reasons"] == [
        "Adjusted to max price change guardrail",
        "Raised to satisfy minimum margin",
        "Cannot satisfy margin within max price change guardrail",
    ]
    assert data["recommendations"][0]["guardrailNote"].startswith("No safe price was found")


def test_recommendations_endpoint_warns_when_nothing_matches() -> None:
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=recommendation_body(new_price=120))

    assert response.status_code == 200
    payload = response.json()
    assert payload["data"]["recommendations"] == []
    assert payload["warnings"] == ["No enabled rule matched this event."]


def test_recommendations_endpoint_can_omit_plain_language_fields() -> None:
    config = build_test_config(include_plain_language_fields=False)
    with api_test_client(config=config) as client:
        response = client.post("/api/v1/pricing/recommendations", json=recommendation_body())

    recommendation = response.json()["data"]["recommendations"][0]
    assert recommendation["recommendedPriceAction"] is None
    assert recommendation["guardrailNote"] is None
    assert recommendation["whyThisPrice"] is None


def test_invalid_event_payload_maps_to_422() -> None:
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=recommendation_body(new_price=-5))

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "INVALID_EVENT_PAYLOAD"
    assert payload["request_id"]
    assert payload["details"][0]["loc"] == ["newPrice"]


def test_unknown_event_type_maps_to_validation_error() -> None:
    body = recommendation_body()
    body["event"]["type"] = "PRICE_SURGE"
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=body)

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_malformed_rule_maps_to_validation_error() -> None:
    body = recommendation_body()
    body["rules"][0]["condition"] = {"op": "and", "rules": []}
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=body)

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_non_positive_sku_cost_maps_to_validation_error() -> None:
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/recommendations", json=recommendation_body(cost=0))

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_sku_mismatch_maps_to_400() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/pricing/recommendations",
            json=recommendation_body(event_sku_id="SKU-2"),
        )

    assert response.status_code == 400
    payload = response.json()
    assert payload["error_code"] == "SKU_MISMATCH"
    assert payload["details"] == {"event_sku_id": "SKU-2", "snapshot_sku_id": "SKU-1"}


def test_guardrail_check_adjusts_manual_price() -> None:
    body = {"sku": {"id": "SKU-1", "cost": 80, "currentPrice": 100}, "suggestedPrice": 70}
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/guardrails/check", json=body)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["skuId"] == "SKU-1"
    assert data["guardrail"]["safetyStatus"] == "OK"
    assert _dec(data["guardrail"]["suggestedPriceOriginal"]) == Decimal("70")
    assert _dec(data["guardrail"]["suggestedPriceFinal"]) == Decimal("89")
    assert data["guardrail"]["adjusted"] is True
    assert data["guardrail"]["reasons"] == [
        "Adjusted to max price change guardrail",
        "Raised to satisfy minimum margin",
        "Rounded by workspace setting",
    ]
    assert data["recommendedPriceAction"] == "Price decrease"
    assert data["guardrailNote"].startswith("Guardrails adjusted the price")


def test_guardrail_check_applies_rounding_override() -> None:
    body = {
        "sku": {"id": "SKU-1", "cost": 50, "currentPrice": 100},
        "suggestedPrice": 103,
        "policy": {"maxChangePct": 3, "roundingMode": "NEAREST_5"},
    }
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/guardrails/check", json=body)

    assert response.status_code == 200
    guardrail = response.json()["data"]["guardrail"]
    assert _dec(guardrail["suggestedPriceFinal"]) == Decimal("100")
    assert guardrail["reasons"] == [
        "Rounded by workspace setting",
        "Adjusted after rounding to stay within max price change",
    ]


def test_guardrail_check_reports_unreachable_margin_as_blocked() -> None:
    body = {
        "sku": {"id": "SKU-1", "cost": 80, "currentPrice": 100},
        "suggestedPrice": 95,
        "policy": {"minMarginPct": 100},
    }
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/guardrails/check", json=body)

    assert response.status_code == 200
    guardrail = response.json()["data"]["guardrail"]
    assert guardrail["safetyStatus"] == "BLOCKED"
    assert guardrail["safetyReason"] == "Invalid min margin requirement"


def test_guardrail_check_rejects_money_above_bound() -> None:
    bodies = [
        {"sku": {"id": "SKU-1", "cost": 80, "currentPrice": 100}, "suggestedPrice": 1e30},
        {"sku": {"id": "SKU-1", "cost": 1e30, "currentPrice": 1e30}, "suggestedPrice": 100},
    ]
    with api_test_client() as client:
        responses = [client.post("/api/v1/pricing/guardrails/check", json=body) for body in bodies]

    for response in responses:
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_guardrail_check_handles_prices_at_money_bound() -> None:
    body = {
        "sku": {"id": "SKU-1", "cost": 500000000000, "currentPrice": 1000000000000},
        "suggestedPrice": 1000000000000,
    }
    with api_test_client() as client:
        response = client.post("/api/v1/pricing/guardrails/check", json=body)

    assert response.status_code == 200
    guardrail = response.json()["data"]["guardrail"]
    assert guardrail["safetyStatus"] == "OK"
    assert _dec(guardrail["suggestedPriceFinal"]) == Decimal("1000000000000")
