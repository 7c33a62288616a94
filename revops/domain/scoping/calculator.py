"""
Scope calculator.

Applies a package's pricing rules to the answers a visitor gave in the scoping
quiz. Rules are evaluated in the order they are passed in; every matching rule
adjusts the running price and timeline, so later multipliers see earlier
fixed adjustments.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass
class AppliedRule:
    rule_name: str
    adjustment_label: Optional[str]
    price_adjustment: float
    timeline_adjustment: int

    def to_api(self) -> dict[str, Any]:
        return {
            "ruleName": self.rule_name,
            "adjustmentLabel": self.adjustment_label,
            "priceAdjustment": self.price_adjustment,
            "timelineAdjustment": self.timeline_adjustment,
        }


@dataclass
class ScopeResult:
    base_price: float
    adjusted_price: float
    base_timeline_weeks: int
    adjusted_timeline_weeks: int
    applied_rules: list[AppliedRule] = field(default_factory=list)

    def to_api(self) -> dict[str, Any]:
        return {
            "basePrice": self.base_price,
            "adjustedPrice": self.adjusted_price,
            "baseTimelineWeeks": self.base_timeline_weeks,
            "adjustedTimelineWeeks": self.adjusted_timeline_weeks,
            "appliedRules": [rule.to_api() for rule in self.applied_rules],
        }


def to_number(value: Any) -> Optional[float]:
    """Numeric value of ints, floats and numeric strings; None for anything else"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, bool) or isinstance(expected, bool):
        left, right = _to_bool(value), _to_bool(expected)
        return left is not None and left == right

    left, right = to_number(value), to_number(expected)
    if left is not None and right is not None:
        return left == right

    if isinstance(value, str) and isinstance(expected, str):
        return value.strip().lower() == expected.strip().lower()
    return value == expected


def _in_range(value: Any, bounds: Any) -> bool:
    number = to_number(value)
    if number is None or not isinstance(bounds, dict):
        return False

    low = to_number(bounds.get("min"))
    high = to_number(bounds.get("max"))
    if low is not None and number < low:
        return False
    if high is not None and number > high:
        return False
    return True


def _contains(value: Any, expected: Any) -> bool:
    if isinstance(expected, list):
        return any(_equals(value, item) for item in expected)
    if isinstance(value, list):
        return any(_equals(item, expected) for item in value)
    if isinstance(value, str) and isinstance(expected, str):
        return expected.lower() in value.lower()
    return False


def rule_matches(operator: str, value: Any, condition_value: Any) -> bool:
    """True when ``value`` satisfies ``operator`` against ``condition_value``"""
    if operator == "equals":
        return _equals(value, condition_value)
    if operator in ("greater_than", "less_than"):
        left, right = to_number(value), to_number(condition_value)
        if left is None or right is None:
            return False
        return left > right if operator == "greater_than" else left < right
    if operator == "in_range":
        return _in_range(value, condition_value)
    if operator == "contains":
        return _contains(value, condition_value)
    return False


def apply_price_adjustment(price: float, adjustment_type: Optional[str], amount: Optional[float]) -> float:
    if not adjustment_type or amount is None:
        return price
    if adjustment_type == "multiplier":
        return price * amount
    if adjustment_type == "fixed_add":
        return price + amount
    if adjustment_type == "fixed_subtract":
        return max(price - amount, 0.0)
    return price


def calculate_scope(
    base_price: float, base_weeks: Optional[int], rules: Iterable[Any], inputs: dict[str, Any]
) -> ScopeResult:
    """
    Run ``rules`` (ScopingRule rows, already ordered) against quiz ``inputs``.

    A rule is skipped when its factor key is absent from the inputs.
    """
    price = float(base_price or 0)
    weeks = int(base_weeks or 0)
    applied: list[AppliedRule] = []

    for rule in rules:
        if rule.factor_key not in inputs:
            continue
        if not rule_matches(rule.operator, inputs[rule.factor_key], rule.condition_value):
            continue

        new_price = apply_price_adjustment(
            price, rule.price_adjustment_type, rule.price_adjustment_value
        )
        timeline_delta = int(rule.timeline_adjustment_weeks or 0)

        applied.append(
            AppliedRule(
                rule_name=rule.rule_name,
                adjustment_label=rule.adjustment_label,
                price_adjustment=round(new_price - price, 2),
                timeline_adjustment=timeline_delta,
            )
        )
        price = new_price
        weeks += timeline_delta

    return ScopeResult(
        base_price=float(base_price or 0),
        adjusted_price=round(price, 2),
        base_timeline_weeks=int(base_weeks or 0),
        adjusted_timeline_weeks=weeks,
        applied_rules=applied,
    )
