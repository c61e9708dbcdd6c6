# This file defines runtime configuration for the pricing decision engine.
# It exists so the API, the CLI, and embedding hosts all fall back to one consistent guardrail policy.
# The loader merges YAML defaults with environment overrides and validates the default policy.
# Tenant overrides are resolved on top of these defaults without validation: a degenerate tenant
# policy must come back from the enforcer as BLOCKED instead of failing the whole request.

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import yaml

from src.pricing_engine.action_synthesizer import DEFAULT_CURRENCY_LABEL
from src.pricing_engine.guardrail_enforcer import GuardrailPolicy
from src.pricing_engine.price_rounding import ROUNDING_MODE_VALUES, RoundingMode, parse_rounding_mode
from src.pricing_engine.pricing_math import to_decimal

DEFAULT_CONFIG_PATH = "configs/pricing_policy.yaml"
DEFAULT_MIN_MARGIN_PCT = Decimal("10")
DEFAULT_MAX_CHANGE_PCT = Decimal("15")
DEFAULT_ROUNDING_MODE = RoundingMode.NEAREST_1


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config at {path} must be a mapping, got: {type(loaded).__name__}")
    return dict(loaded)


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def _env_decimal(name: str, default: Decimal) -> Decimal:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be numeric, got: {value!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"{name} must be finite, got: {value!r}")
    return parsed


def _as_decimal(value: Any, field_name: str) -> Decimal:
    try:
        parsed = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be numeric, got: {value!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"{field_name} must be finite, got: {value!r}")
    return parsed


@dataclass(frozen=True)
class PricingConfig:
    pricing_policy_version: str
    default_min_margin_pct: Decimal
    default_max_change_pct: Decimal
    default_rounding_mode: RoundingMode
    currency_label: str

    def default_policy(self) -> GuardrailPolicy:
        return GuardrailPolicy(
            min_margin_pct=self.default_min_margin_pct,
            max_change_pct=self.default_max_change_pct,
            rounding_mode=self.default_rounding_mode,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "pricing_policy_version": self.pricing_policy_version,
            "default_min_margin_pct": str(self.default_min_margin_pct),
            "default_max_change_pct": str(self.default_max_change_pct),
            "default_rounding_mode": self.default_rounding_mode.value,
            "currency_label": self.currency_label,
        }


def default_pricing_config() -> PricingConfig:
    return PricingConfig(
        pricing_policy_version="pe1",
        default_min_margin_pct=DEFAULT_MIN_MARGIN_PCT,
        default_max_change_pct=DEFAULT_MAX_CHANGE_PCT,
        default_rounding_mode=DEFAULT_ROUNDING_MODE,
        currency_label=DEFAULT_CURRENCY_LABEL,
    )


def load_pricing_config(*, config_path: str = DEFAULT_CONFIG_PATH) -> PricingConfig:
    cfg = _load_yaml(config_path)
    guardrails_cfg = dict(cfg.get("guardrails", {}) or {})

    pricing_policy_version = str(_env_str("PRICING_POLICY_VERSION", str(cfg.get("pricing_policy_version", "pe1"))))
    min_margin_pct = _env_decimal(
        "PRICING_MIN_MARGIN_PCT",
        _as_decimal(guardrails_cfg.get("min_margin_pct", DEFAULT_MIN_MARGIN_PCT), "guardrails.min_margin_pct"),
    )
    max_change_pct = _env_decimal(
        "PRICING_MAX_CHANGE_PCT",
        _as_decimal(guardrails_cfg.get("max_change_pct", DEFAULT_MAX_CHANGE_PCT), "guardrails.max_change_pct"),
    )
    raw_rounding_mode = str(
        _env_str("PRICING_ROUNDING_MODE", str(guardrails_cfg.get("rounding_mode", DEFAULT_ROUNDING_MODE.value)))
    ).strip()
    currency_label = str(_env_str("PRICING_CURRENCY_LABEL", str(cfg.get("currency_label", DEFAULT_CURRENCY_LABEL))))

    if raw_rounding_mode not in ROUNDING_MODE_VALUES:
        raise ValueError(
            f"PRICING_ROUNDING_MODE must be one of {sorted(mode.value for mode in RoundingMode)}, "
            f"got {raw_rounding_mode!r}"
        )
    if not (0 <= min_margin_pct < 100):
        raise ValueError("default min_margin_pct must be in [0, 100)")
    if max_change_pct < 0:
        raise ValueError("default max_change_pct must be nonnegative")
    if not currency_label.strip():
        raise ValueError("currency_label must not be blank")

    return PricingConfig(
        pricing_policy_version=pricing_policy_version,
        default_min_margin_pct=min_margin_pct,
        default_max_change_pct=max_change_pct,
        default_rounding_mode=parse_rounding_mode(raw_rounding_mode),
        currency_label=currency_label,
    )


def resolve_guardrail_policy(
    config: PricingConfig,
    overrides: Mapping[str, Any] | None = None,
) -> GuardrailPolicy:
    """Apply tenant settings over configured defaults.

    Accepts both the stored settings names (`minMarginPercent`, `maxPriceChangePercent`)
    and the policy names (`minMarginPct`, `maxChangePct`). Unknown rounding modes fall
    back to the configured default.
    """

    values = dict(overrides or {})
    min_margin = values.get("minMarginPct", values.get("minMarginPercent"))
    max_change = values.get("maxChangePct", values.get("maxPriceChangePercent"))
    rounding = values.get("roundingMode")

    return GuardrailPolicy(
        min_margin_pct=(
            _as_decimal(min_margin, "minMarginPct") if min_margin is not None else config.default_min_margin_pct
        ),
        max_change_pct=(
            _as_decimal(max_change, "maxChangePct") if max_change is not None else config.default_max_change_pct
        ),
        rounding_mode=(
            parse_rounding_mode(rounding, default=config.default_rounding_mode)
            if rounding is not None
            else config.default_rounding_mode
        ),
    )
