# This file provides dependency factories for FastAPI routes.
# It exists so the pricing policy is loaded once and the service is shared through dependency injection.
# The setup keeps routers thin and makes endpoint tests easy to override.

from __future__ import annotations

from functools import lru_cache

from src.api.api_config import ApiConfig, get_api_config
from src.api.services.pricing_service import RecommendationService
from src.pricing_engine.pricing_config import PricingConfig, load_pricing_config


@lru_cache(maxsize=1)
def get_pricing_config() -> PricingConfig:
    config = get_api_config()
    return load_pricing_config(config_path=config.pricing_config_path)


@lru_cache(maxsize=1)
def get_recommendation_service() -> RecommendationService:
    return RecommendationService(pricing_config=get_pricing_config())


def get_config() -> ApiConfig:
    return get_api_config()
