# This file builds the response envelope shared by pricing endpoints.
# Hosts persist recommendations for audit, so every payload carries version metadata and the request id.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from src.api.schema_versions import build_version_fields


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def build_object_envelope(
    *,
    api_version_path: str,
    schema_version: str,
    request_id: str,
    data: dict[str, Any] | None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard response envelope."""

    return {
        **build_version_fields(api_version_path=api_version_path, schema_version=schema_version),
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "warnings": warnings,
    }
