# This test file validates dotted path lookups used by rule conditions.
# Missing keys and non-container intermediates must resolve to None so conditions fail closed.

from __future__ import annotations

from decimal import Decimal

from src.pricing_engine.path_resolver import get_by_path, resolve_operand


def test_get_by_path_walks_nested_mappings_and_sequences() -> None:
    value = {"payload": {"tiers": [{"price": Decimal("9.5")}, {"price": Decimal("12")}]}}

    assert get_by_path(value, "payload.tiers.1.price") == Decimal("12")
    assert get_by_path(value, "payload.tiers.0") == {"price": Decimal("9.5")}


def test_get_by_path_returns_none_for_missing_or_non_container() -> None:
    value = {"payload": {"newPrice": Decimal("95"), "tiers": [1, 2]}}

    assert get_by_path(value, "payload.missing") is None
    assert get_by_path(value, "payload.newPrice.value") is None
    assert get_by_path(value, "payload.tiers.5") is None
    assert get_by_path(value, "payload.tiers.first") is None
    assert get_by_path(None, "payload.newPrice") is None


def test_resolve_operand_looks_up_payload_and_sku_paths() -> None:
    context = {"payload": {"newPrice": Decimal("95")}, "sku": {"currentPrice": Decimal("100")}}

    assert resolve_operand("payload.newPrice", context) == Decimal("95")
    assert resolve_operand("sku.currentPrice", context) == Decimal("100")
    assert resolve_operand("sku.cost", context) is None


def test_resolve_operand_returns_literals_unchanged() -> None:
    context = {"payload": {"competitorId": "C-1"}, "sku": None}

    assert resolve_operand(Decimal("10"), context) == Decimal("10")
    assert resolve_operand("C-1", context) == "C-1"
    assert resolve_operand("other.path", context) == "other.path"
    assert resolve_operand("sku.currentPrice", context) is None
