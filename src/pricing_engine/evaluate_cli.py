# This module is the command-line entry point for evaluating events and prices locally.
# It exists so operators can replay a stored event against a rule set, or check a manual price,
# without standing up the API. Output is JSON on stdout, matching the API payload shapes.

from __future__ import annotations

import argparse
import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from src.common.logging import configure_logging
from src.common.settings import get_settings
from src.pricing_engine.events import parse_event_input
from src.pricing_engine.pricing_config import PricingConfig, load_pricing_config, resolve_guardrail_policy
from src.pricing_engine.recommendation_runner import ensure_sku_matches_event, evaluate_event, revalidate_price
from src.pricing_engine.rule_matcher import SkuSnapshot
from src.pricing_engine.rules import Rule

LOGGER = logging.getLogger("pricing_engine")


def _decimal_arg(value: str) -> Decimal:
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}") from exc
    if not parsed.is_finite():
        raise argparse.ArgumentTypeError(f"expected a finite number, got {value!r}")
    return parsed


def _load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = json.load(handle)
    if not isinstance(loaded, dict):
        raise ValueError(f"Input at {path} must be a JSON object, got: {type(loaded).__name__}")
    return loaded


def recommend(*, request: dict[str, Any], config: PricingConfig) -> dict[str, Any]:
    raw_event = dict(request.get("event") or {})
    event = parse_event_input(raw_event.get("type", ""), raw_event.get("payload"))
    sku = SkuSnapshot.from_mapping(dict(request.get("sku") or {}))
    ensure_sku_matches_event(event, sku)
    rules = [Rule.model_validate(item) for item in list(request.get("rules") or [])]
    policy = resolve_guardrail_policy(config, request.get("policy"))

    recommendations = evaluate_event(event, sku, rules, policy, currency_label=config.currency_label)
    blocked_count = sum(1 for item in recommendations if item.guardrail is not None and item.guardrail.blocked)
    LOGGER.info(
        "evaluated event type=%s sku_id=%s rules=%d recommendations=%d blocked=%d",
        event.type.value,
        sku.id,
        len(rules),
        len(recommendations),
        blocked_count,
    )
    return {
        "eventType": event.type.value,
        "skuId": sku.id,
        "policy": policy.to_dict(),
        "recommendations": [item.to_dict() for item in recommendations],
    }


def check_price(*, args: argparse.Namespace, config: PricingConfig) -> dict[str, Any]:
    sku = SkuSnapshot.from_mapping({"id": args.sku_id, "cost": args.cost, "currentPrice": args.current_price})
    overrides = {
        "minMarginPct": args.min_margin_pct,
        "maxChangePct": args.max_change_pct,
        "roundingMode": args.rounding_mode,
    }
    policy = resolve_guardrail_policy(config, {key: value for key, value in overrides.items() if value is not None})
    result = revalidate_price(sku, args.suggested_price, policy)
    LOGGER.info(
        "guardrail check sku_id=%s status=%s final=%s",
        sku.id,
        result.safety_status.value,
        result.suggested_price_final,
    )
    return {"skuId": sku.id, "policy": policy.to_dict(), "guardrail": result.to_dict()}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pricing decision engine utilities")
    parser.add_argument("--config", type=str, default=None, help="Path to pricing policy YAML")
    subparsers = parser.add_subparsers(dest="command", required=True)

    recommend_parser = subparsers.add_parser("recommend", help="Evaluate an event against a rule set")
    recommend_parser.add_argument("--input", required=True, help="JSON file with event, sku, rules, and optional policy")

    guardrail_parser = subparsers.add_parser("guardrail", help="Check a single price against the guardrails")
    guardrail_parser.add_argument("--sku-id", type=str, default="manual")
    guardrail_parser.add_argument("--cost", type=_decimal_arg, required=True)
    guardrail_parser.add_argument("--current-price", type=_decimal_arg, required=True)
    guardrail_parser.add_argument("--suggested-price", type=_decimal_arg, required=True)
    guardrail_parser.add_argument("--min-margin-pct", type=_decimal_arg, default=None)
    guardrail_parser.add_argument("--max-change-pct", type=_decimal_arg, default=None)
    guardrail_parser.add_argument("--rounding-mode", type=str, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()
    config = load_pricing_config(config_path=args.config or get_settings().PRICING_CONFIG_PATH)

    try:
        if args.command == "recommend":
            result = recommend(request=_load_json(args.input), config=config)
        else:
            result = check_price(args=args, config=config)
    except ValueError as exc:
        LOGGER.error("pricing evaluation failed: %s", exc)
        raise SystemExit(2) from exc

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
