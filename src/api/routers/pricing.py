# This file defines pricing decision endpoints under the versioned API path.
# It exists so hosts can evaluate one event against their rules and re-check any price against guardrails.
# Both endpoints are synchronous and stateless; persistence of the result is the caller's job.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config, get_recommendation_service
from src.api.response_envelope import build_object_envelope
from src.api.schemas.pricing_schemas import (
    GuardrailCheckRequestV1,
    GuardrailCheckResponseV1,
    RecommendationRequestV1,
    RecommendationResponseV1,
)
from src.api.services.pricing_service import RecommendationService

router = APIRouter(prefix="/pricing", tags=["pricing"])
RecommendationServiceDep = Annotated[RecommendationService, Depends(get_recommendation_service)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]


@router.post("/recommendations", response_model=RecommendationResponseV1)
def pricing_recommendations(
    body: RecommendationRequestV1,
    request: Request,
    service: RecommendationServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    data = service.recommend(body, include_plain_language_fields=config.include_plain_language_fields)
    warnings = None if data["recommendations"] else ["No enabled rule matched this event."]
    return build_object_envelope(
        api_version_path=config.api_version_path,
        schema_version=config.schema_version,
        request_id=request.state.request_id,
        data=data,
        warnings=warnings,
    )


@router.post("/guardrails/check", response_model=GuardrailCheckResponseV1)
def pricing_guardrail_check(
    body: GuardrailCheckRequestV1,
    request: Request,
    service: RecommendationServiceDep,
    config: ConfigDep,
) -> dict[str, object]:
    data = service.check_guardrails(body, include_plain_language_fields=config.include_plain_language_fields)
    return build_object_envelope(
        api_version_path=config.api_version_path,
        schema_version=config.schema_version,
        request_id=request.state.request_id,
        data=data,
    )
