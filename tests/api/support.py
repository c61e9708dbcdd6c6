# This file provides shared helpers for API endpoint tests.
# It exists so tests can override the config and service dependencies without reading the environment.
# The helpers build consistent config objects and scoped TestClient contexts.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.dependencies import get_config, get_recommendation_service
from src.api.services.pricing_service import RecommendationService
from src.pricing_engine.pricing_config import default_pricing_config

PRICING_POLICY_PATH = str(Path(__file__).resolve().parents[2] / "configs" / "pricing_policy.yaml")


def build_test_config(
    *,
    include_plain_language_fields: bool = True,
    pricing_config_path: str = PRICING_POLICY_PATH,
) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Pricing API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        enable_request_logging=False,
        include_plain_language_fields=include_plain_language_fields,
        allowed_origins=[],
        pricing_config_path=pricing_config_path,
        app_version="0.1.0",
    )


def build_test_service() -> RecommendationService:
    return RecommendationService(pricing_config=default_pricing_config())


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    recommendation_service: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()
    resolved_service = recommendation_service or build_test_service()

    app.dependency_overrides[get_config] = lambda: resolved_config
    app.dependency_overrides[get_recommendation_service] = lambda: resolved_service

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def recommendation_body(
    *,
    event_sku_id: str = "SKU-1",
    new_price: Any = 95,
    cost: Any = 80,
    current_price: Any = 100,
    policy: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "event": {
            "type": "COMPETITOR_PRICE_DROP",
            "payload": {
                "skuId": event_sku_id,
                "competitorId": "COMP-9",
                "oldPrice": 110,
                "newPrice": new_price,
            },
        },
        "sku": {"id": "SKU-1", "cost": cost, "currentPrice": current_price},
        "rules": [
            {
                "id": "match",
                "name": "Match undercut",
                "eventType": "COMPETITOR_PRICE_DROP",
                "enabled": True,
                "condition": {"op": "lt", "left": "payload.newPrice", "right": "sku.currentPrice"},
                "actionTemplate": {"type": "PRICE_MATCH", "params": {}},
            },
            {
                "id": "stock",
                "name": "Low stock",
                "eventType": "STOCK_LOW",
                "condition": {"op": "lt", "left": "payload.available", "right": "payload.threshold"},
                "actionTemplate": {"type": "NOTIFY"},
            },
        ],
    }
    if policy is not None:
        body["policy"] = policy
    return body
