# This file defines runtime settings for the API layer in one place.
# It exists so versioning, plain-language output, and the policy file location can be configured without code edits.
# The config loader reads environment variables and applies safe defaults for local development.

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.pricing_engine.pricing_config import DEFAULT_CONFIG_PATH


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Pricing Decision Engine API"
    api_version_path: str = "/api/v1"
    schema_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "local"
    enable_request_logging: bool = False
    include_plain_language_fields: bool = True
    allowed_origins: list[str] = Field(default_factory=list)
    pricing_config_path: str = DEFAULT_CONFIG_PATH
    app_version: str = "0.1.0"

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if len(parts) < 2 or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/api/v1'.")
        return value.rstrip("/")

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not (0 < value < 65536):
            raise ValueError("port must be in 1..65535.")
        return value

    @field_validator("pricing_config_path")
    @classmethod
    def validate_pricing_config_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("pricing_config_path must not be blank.")
        return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Pricing Decision Engine API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/api/v1"),
        "schema_version": os.getenv("API_SCHEMA_VERSION", "1.0.0"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": _env_int("API_PORT", 8000),
        "environment": os.getenv("ENV", "local"),
        "enable_request_logging": _env_bool("API_ENABLE_REQUEST_LOGGING", False),
        "include_plain_language_fields": _env_bool("API_INCLUDE_PLAIN_LANGUAGE_FIELDS", True),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "pricing_config_path": os.getenv("PRICING_CONFIG_PATH", DEFAULT_CONFIG_PATH),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
