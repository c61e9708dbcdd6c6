# This module reconciles a raw suggested price with the workspace pricing guardrails.
# Minimum margin is a hard financial floor, max price change bounds operator trust, rounding is cosmetic.
# Steps run in a fixed order as a pipeline over (candidate, reasons); the order changes outcomes near
# band edges, so each step is a separate function that either continues or returns a BLOCKED result.
# BLOCKED is an ordinary result value: "no safe price exists" is expected and frequent.

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from src.pricing_engine.price_rounding import (
    RoundingMode,
    apply_rounding,
    round_down_to_mode,
    round_up_to_mode,
)
from src.pricing_engine.pricing_math import HUNDRED, calc_margin_percent, round2, to_decimal

REASON_MAX_CHANGE_CLAMP = "Adjusted to max price change guardrail"
REASON_MARGIN_RAISE = "Raised to satisfy minimum margin"
REASON_ROUNDED = "Rounded by workspace setting"
REASON_ROUNDING_BAND_LOWER = "Adjusted after rounding to stay within price change guardrail"
REASON_ROUNDING_MARGIN = "Adjusted after rounding to satisfy minimum margin"
REASON_ROUNDING_BAND_UPPER = "Adjusted after rounding to stay within max price change"

BLOCK_INVALID_MIN_MARGIN = "Invalid min margin requirement"
BLOCK_MARGIN_OUTSIDE_BAND = "Cannot satisfy margin within max price change guardrail"
BLOCK_MARGIN_AFTER_ROUNDING = "Cannot satisfy minimum margin after rounding and max-change guardrail"
BLOCK_BAND_AFTER_ROUNDING = "Cannot satisfy max price change guardrail after rounding"


class SafetyStatus(str, Enum):
    OK = "OK"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class GuardrailPolicy:
    """Tenant pricing guardrails. Values are not validated: a degenerate policy yields BLOCKED."""

    min_margin_pct: Decimal = Decimal("10")
    max_change_pct: Decimal = Decimal("15")
    rounding_mode: RoundingMode = RoundingMode.NEAREST_1

    def to_dict(self) -> dict[str, Any]:
        return {
            "minMarginPct": self.min_margin_pct,
            "maxChangePct": self.max_change_pct,
            "roundingMode": RoundingMode(self.rounding_mode).value,
        }


@dataclass(frozen=True)
class GuardrailResult:
    safety_status: SafetyStatus
    suggested_price_original: Decimal
    suggested_price_final: Decimal
    adjusted: bool
    reasons: tuple[str, ...] = ()
    safety_reason: str | None = None

    @property
    def blocked(self) -> bool:
        return self.safety_status == SafetyStatus.BLOCKED

    def to_dict(self) -> dict[str, Any]:
        return {
            "safetyStatus": self.safety_status.value,
            "safetyReason": self.safety_reason,
            "suggestedPriceOriginal": self.suggested_price_original,
            "suggestedPriceFinal": self.suggested_price_final,
            "adjusted": self.adjusted,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class ClampOutcome:
    price: Decimal
    adjusted: bool
    reason: str | None = None


@dataclass(frozen=True)
class MarginOutcome:
    price: Decimal
    adjusted: bool
    blocked: bool
    reason: str | None = None


def price_change_band(current_price: Any, max_change_pct: Any) -> tuple[Decimal, Decimal]:
    current = to_decimal(current_price)
    ratio = to_decimal(max_change_pct) / HUNDRED
    return current * (1 - ratio), current * (1 + ratio)


def clamp_price_change(current_price: Any, suggested_price: Any, max_change_pct: Any) -> ClampOutcome:
    current = to_decimal(current_price)
    suggested = to_decimal(suggested_price)
    max_pct = to_decimal(max_change_pct)
    if current <= 0 or max_pct < 0:
        return ClampOutcome(price=round2(suggested), adjusted=False)

    min_allowed, max_allowed = price_change_band(current, max_pct)
    clamped = max(min_allowed, min(max_allowed, suggested))
    adjusted = clamped != suggested
    return ClampOutcome(
        price=round2(clamped),
        adjusted=adjusted,
        reason=REASON_MAX_CHANGE_CLAMP if adjusted else None,
    )


def min_price_for_margin(cost: Any, min_margin_pct: Any) -> Decimal | None:
    """Lowest price meeting the margin floor, or None when the requirement cannot be met at any price."""

    margin_pct = to_decimal(min_margin_pct)
    if margin_pct >= HUNDRED:
        return None
    denominator = 1 - margin_pct / HUNDRED
    if denominator <= 0:
        return None
    return to_decimal(cost) / denominator


def enforce_min_margin(cost: Any, suggested_price: Any, min_margin_pct: Any) -> MarginOutcome:
    suggested = to_decimal(suggested_price)
    floor_price = min_price_for_margin(cost, min_margin_pct)
    if floor_price is None:
        return MarginOutcome(price=round2(suggested), adjusted=False, blocked=True, reason=BLOCK_INVALID_MIN_MARGIN)

    if suggested >= floor_price:
        return MarginOutcome(price=round2(suggested), adjusted=False, blocked=False)

    return MarginOutcome(price=round2(floor_price), adjusted=True, blocked=False, reason=REASON_MARGIN_RAISE)


@dataclass
class _EnforcementState:
    cost: Decimal
    current_price: Decimal
    min_margin_pct: Decimal
    max_change_pct: Decimal
    rounding_mode: RoundingMode
    original: Decimal
    min_allowed: Decimal
    max_allowed: Decimal
    candidate: Decimal
    reasons: list[str] = field(default_factory=list)

    def block(self, reason: str) -> GuardrailResult:
        final = round2(self.candidate)
        return GuardrailResult(
            safety_status=SafetyStatus.BLOCKED,
            safety_reason=reason,
            suggested_price_original=self.original,
            suggested_price_final=final,
            adjusted=final != self.original,
            reasons=tuple(self.reasons) + (reason,),
        )


_Step = Callable[[_EnforcementState], GuardrailResult | None]


def _clamp_to_band(state: _EnforcementState) -> GuardrailResult | None:
    clamp = clamp_price_change(state.current_price, state.candidate, state.max_change_pct)
    if clamp.adjusted and clamp.reason:
        state.reasons.append(clamp.reason)
    state.candidate = clamp.price
    return None


def _raise_to_margin_floor(state: _EnforcementState) -> GuardrailResult | None:
    margin = enforce_min_margin(state.cost, state.candidate, state.min_margin_pct)
    if margin.blocked:
        return state.block(margin.reason or BLOCK_INVALID_MIN_MARGIN)
    if margin.adjusted and margin.reason:
        state.reasons.append(margin.reason)
    state.candidate = margin.price
    return None


def _require_margin_within_band(state: _EnforcementState) -> GuardrailResult | None:
    if state.candidate > state.max_allowed:
        return state.block(BLOCK_MARGIN_OUTSIDE_BAND)
    return None


def _apply_rounding_mode(state: _EnforcementState) -> GuardrailResult | None:
    rounded = apply_rounding(state.candidate, state.rounding_mode)
    if rounded != state.candidate:
        state.reasons.append(REASON_ROUNDED)
    state.candidate = rounded
    return None


def _repair_band_lower_bound(state: _EnforcementState) -> GuardrailResult | None:
    if state.candidate < state.min_allowed:
        raised = round_up_to_mode(state.min_allowed, state.rounding_mode)
        if raised <= state.max_allowed:
            state.candidate = raised
            state.reasons.append(REASON_ROUNDING_BAND_LOWER)
    return None


def _repair_margin_after_rounding(state: _EnforcementState) -> GuardrailResult | None:
    margin = enforce_min_margin(state.cost, state.candidate, state.min_margin_pct)
    if margin.blocked or not margin.adjusted:
        return None

    raised = round_up_to_mode(margin.price, state.rounding_mode)
    if raised > state.max_allowed:
        return state.block(BLOCK_MARGIN_AFTER_ROUNDING)
    state.candidate = raised
    state.reasons.append(REASON_ROUNDING_MARGIN)
    return None


def _repair_band_upper_bound(state: _EnforcementState) -> GuardrailResult | None:
    if state.candidate <= state.max_allowed:
        return None

    lowered = round_down_to_mode(state.max_allowed, state.rounding_mode)
    if lowered < state.cost or calc_margin_percent(state.cost, lowered) < state.min_margin_pct:
        return state.block(BLOCK_BAND_AFTER_ROUNDING)
    state.candidate = lowered
    state.reasons.append(REASON_ROUNDING_BAND_UPPER)
    return None


GUARDRAIL_STEPS: tuple[_Step, ...] = (
    _clamp_to_band,
    _raise_to_margin_floor,
    _require_margin_within_band,
    _apply_rounding_mode,
    _repair_band_lower_bound,
    _repair_margin_after_rounding,
    _repair_band_upper_bound,
)


def enforce_guardrails(
    *,
    cost: Any,
    current_price: Any,
    suggested_price: Any,
    policy: GuardrailPolicy | None = None,
) -> GuardrailResult:
    """Run a raw suggested price through the guardrail pipeline.

    Identical inputs always produce an equal result, so hosts can re-run this at
    execution time against fresh SKU numbers instead of trusting a stored result.
    """

    resolved = policy or GuardrailPolicy()
    current = to_decimal(current_price)
    max_change_pct = to_decimal(resolved.max_change_pct)
    min_allowed, max_allowed = price_change_band(current, max_change_pct)
    original = round2(suggested_price)

    state = _EnforcementState(
        cost=to_decimal(cost),
        current_price=current,
        min_margin_pct=to_decimal(resolved.min_margin_pct),
        max_change_pct=max_change_pct,
        rounding_mode=RoundingMode(resolved.rounding_mode),
        original=original,
        min_allowed=min_allowed,
        max_allowed=max_allowed,
        candidate=original,
    )

    for step in GUARDRAIL_STEPS:
        outcome = step(state)
        if outcome is not None:
            return outcome

    final = round2(state.candidate)
    return GuardrailResult(
        safety_status=SafetyStatus.OK,
        suggested_price_original=original,
        suggested_price_final=final,
        adjusted=final != original,
        reasons=tuple(state.reasons),
    )
