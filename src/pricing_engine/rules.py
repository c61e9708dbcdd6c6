# This module defines tenant-owned pricing rules: a condition tree plus an action template.
# Condition trees are a tagged union of comparisons and and/or groups with at least one child.
# Numeric literals are parsed as Decimals so comparisons against payload prices stay exact.
# Create/update schemas mirror what the rule editor submits before a rule is stored by the host.

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Field, model_validator

from src.pricing_engine.events import EventType, WireModel

ComparisonOp = Literal["lt", "lte", "gt", "gte", "eq", "neq"]
BooleanOp = Literal["and", "or"]
Operand = Union[Decimal, Annotated[str, Field(min_length=1)]]


class ActionType(str, Enum):
    PRICE_MATCH = "PRICE_MATCH"
    PRICE_INCREASE = "PRICE_INCREASE"
    NOTIFY = "NOTIFY"


PRICE_ACTION_TYPES = frozenset({ActionType.PRICE_MATCH, ActionType.PRICE_INCREASE})


class ComparisonCondition(WireModel):
    op: ComparisonOp
    left: Operand
    right: Operand


class BooleanCondition(WireModel):
    op: BooleanOp
    rules: list[ConditionNode] = Field(min_length=1)


ConditionNode = ComparisonCondition | BooleanCondition

BooleanCondition.model_rebuild()


class ActionTemplate(WireModel):
    type: ActionType
    params: dict[str, Any] = Field(default_factory=dict)


class Rule(WireModel):
    id: str = Field(min_length=1)
    name: str
    event_type: EventType
    enabled: bool = True
    condition: ConditionNode
    action_template: ActionTemplate


class RuleCreate(WireModel):
    name: str = Field(min_length=2)
    event_type: EventType
    enabled: bool = True
    condition: ConditionNode
    action_template: ActionTemplate

    def to_rule(self, rule_id: str) -> Rule:
        return Rule(id=rule_id, **self.model_dump())


class RuleUpdate(WireModel):
    name: str | None = Field(default=None, min_length=2)
    event_type: EventType | None = None
    enabled: bool | None = None
    condition: ConditionNode | None = None
    action_template: ActionTemplate | None = None

    @model_validator(mode="after")
    def require_one_field(self) -> RuleUpdate:
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        return self

    def apply_to(self, rule: Rule) -> Rule:
        changes = {name: getattr(self, name) for name in self.model_fields_set if getattr(self, name) is not None}
        return rule.model_copy(update=changes)
