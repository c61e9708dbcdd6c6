# This module resolves dotted paths such as `payload.newPrice` against the evaluation context.
# Missing keys and non-container intermediates resolve to None so conditions fail closed.

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

RESOLVABLE_PREFIXES = ("payload.", "sku.")


def get_by_path(value: Any, path: str) -> Any:
    segments = [segment for segment in path.split(".") if segment]
    current = value

    for segment in segments:
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.isdigit() or int(segment) >= len(current):
                return None
            current = current[int(segment)]
        else:
            return None

    return current


def resolve_operand(raw: Decimal | int | float | str, context: Mapping[str, Any]) -> Any:
    """Return a literal operand as-is, or look up `payload.`/`sku.` paths in the context."""

    if not isinstance(raw, str):
        return raw
    if raw.startswith(RESOLVABLE_PREFIXES):
        return get_by_path({"payload": context.get("payload"), "sku": context.get("sku")}, raw)
    return raw
