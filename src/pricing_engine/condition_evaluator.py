# This module evaluates rule condition trees against an event payload and SKU snapshot.
# Ordering comparisons only succeed when both operands are numbers, otherwise they are false.
# An absent field therefore never triggers an action by accident.

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from src.pricing_engine.path_resolver import resolve_operand
from src.pricing_engine.rules import BooleanCondition, ConditionNode

_ORDERING_OPS = {
    "lt": lambda left, right: left < right,
    "lte": lambda left, right: left <= right,
    "gt": lambda left, right: left > right,
    "gte": lambda left, right: left >= right,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool)) or _is_number(value)


def _values_equal(left: Any, right: Any) -> bool:
    if not (_is_scalar(left) and _is_scalar(right)):
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if _is_number(left) != _is_number(right):
        return False
    return left == right


def compare(op: str, left: Any, right: Any) -> bool:
    if op == "eq":
        return _values_equal(left, right)
    if op == "neq":
        return not _values_equal(left, right)

    if not (_is_number(left) and _is_number(right)):
        return False
    return bool(_ORDERING_OPS[op](left, right))


def evaluate_condition(condition: ConditionNode, context: Mapping[str, Any]) -> bool:
    """Evaluate a condition tree against `{"payload": ..., "sku": ...}`."""

    if isinstance(condition, BooleanCondition):
        if condition.op == "and":
            return all(evaluate_condition(child, context) for child in condition.rules)
        return any(evaluate_condition(child, context) for child in condition.rules)

    left = resolve_operand(condition.left, context)
    right = resolve_operand(condition.right, context)
    return compare(condition.op, left, right)
