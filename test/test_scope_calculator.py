from types import SimpleNamespace

import pytest

from revops.domain.scoping.calculator import apply_price_adjustment, calculate_scope, rule_matches


def make_rule(factor_key, operator, condition_value, adjustment_type=None, amount=None, weeks=0, name=None):
    return SimpleNamespace(
        rule_name=name or f"{factor_key} {operator}",
        factor_key=factor_key,
        operator=operator,
        condition_value=condition_value,
        price_adjustment_type=adjustment_type,
        price_adjustment_value=amount,
        timeline_adjustment_weeks=weeks,
        adjustment_label=None,
    )


class TestRuleMatches:
    """Condition operators used by scoping rules."""

    @pytest.mark.parametrize(
        "value, expected, result",
        [
            ("Salesforce", "salesforce", True),
            ("5", 5, True),
            (True, "true", True),
            ("false", True, False),
            ("hubspot", "salesforce", False),
        ],
    )
    def test_equals(self, value, expected, result):
        assert rule_matches("equals", value, expected) is result

    def test_greater_and_less_than_are_numeric(self):
        assert rule_matches("greater_than", "12", 10) is True
        assert rule_matches("less_than", 3, 10) is True
        assert rule_matches("greater_than", "many", 10) is False

    def test_in_range_is_inclusive_with_optional_bounds(self):
        assert rule_matches("in_range", 10, {"min": 10, "max": 20}) is True
        assert rule_matches("in_range", 20, {"min": 10, "max": 20}) is True
        assert rule_matches("in_range", 21, {"min": 10, "max": 20}) is False
        assert rule_matches("in_range", 500, {"min": 100}) is True
        assert rule_matches("in_range", 5, [1, 10]) is False

    def test_contains(self):
        assert rule_matches("contains", "hubspot", ["salesforce", "HubSpot"]) is True
        assert rule_matches("contains", ["cpq", "billing"], "billing") is True
        assert rule_matches("contains", "Salesforce CPQ", "cpq") is True
        assert rule_matches("contains", 5, "5") is False

    def test_unknown_operator_never_matches(self):
        assert rule_matches("between", 5, 5) is False


class TestPriceAdjustment:
    def test_adjustment_types(self):
        assert apply_price_adjustment(1000, "multiplier", 1.5) == 1500
        assert apply_price_adjustment(1000, "fixed_add", 250) == 1250
        assert apply_price_adjustment(1000, "fixed_subtract", 250) == 750

    def test_subtract_never_goes_below_zero(self):
        assert apply_price_adjustment(100, "fixed_subtract", 250) == 0

    def test_missing_type_or_amount_keeps_price(self):
        assert apply_price_adjustment(100, None, 2) == 100
        assert apply_price_adjustment(100, "multiplier", None) == 100


class TestCalculateScope:
    """Rules apply in order, each seeing the running price."""

    def test_rules_compound_in_order(self):
        rules = [
            make_rule("users", "greater_than", 50, "fixed_add", 2000, weeks=1),
            make_rule("users", "greater_than", 50, "multiplier", 1.5, weeks=2),
        ]

        result = calculate_scope(10000, 6, rules, {"users": 80})

        assert result.adjusted_price == 18000
        assert result.adjusted_timeline_weeks == 9
        assert [r.price_adjustment for r in result.applied_rules] == [2000, 6000]

    def test_reversed_order_gives_different_price(self):
        rules = [
            make_rule("users", "greater_than", 50, "multiplier", 1.5),
            make_rule("users", "greater_than", 50, "fixed_add", 2000),
        ]

        assert calculate_scope(10000, 6, rules, {"users": 80}).adjusted_price == 17000

    def test_rules_for_missing_inputs_are_skipped(self):
        rules = [make_rule("integrations", "equals", "yes", "fixed_add", 500)]

        result = calculate_scope(10000, 4, rules, {"users": 10})

        assert result.adjusted_price == 10000
        assert result.applied_rules == []

    def test_timeline_only_rule(self):
        rules = [make_rule("migration", "equals", True, weeks=3, name="Data migration")]

        result = calculate_scope(5000, None, rules, {"migration": True})

        assert result.base_timeline_weeks == 0
        assert result.adjusted_timeline_weeks == 3
        assert result.applied_rules[0].price_adjustment == 0

    def test_api_payload_keys(self):
        payload = calculate_scope(100, 2, [], {}).to_api()

        assert payload == {
            "basePrice": 100.0,
            "adjustedPrice": 100.0,
            "baseTimelineWeeks": 2,
            "adjustedTimelineWeeks": 2,
            "appliedRules": [],
        }
