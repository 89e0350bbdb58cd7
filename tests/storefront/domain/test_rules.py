"""Tests for parsing stored rule documents into typed rules."""

from decimal import Decimal

from storefront.pricing.rules import (
    BulkPercentDiscount,
    BuyNPayM,
    BuyXGetYFree,
    RuleKind,
    parse_rule,
)


class TestRuleKind:
    def test_stored_values(self):
        assert RuleKind("BUY_ONE_GET_ONE_FREE") is RuleKind.BUY_X_GET_Y_FREE
        assert RuleKind("BUY_3_PAY_2") is RuleKind.BUY_N_PAY_M
        assert RuleKind("BULK_DISCOUNT") is RuleKind.BULK_PERCENT_DISCOUNT


class TestBuyXGetYFree:
    def test_parse(self):
        rule = parse_rule(
            "promo-1",
            "BUY_ONE_GET_ONE_FREE",
            {"trigger_sku": "A", "free_sku": "B", "trigger_quantity": 1, "free_quantity": 1},
            "Laptop with free mouse",
        )
        assert rule == BuyXGetYFree(
            rule_id="promo-1",
            description="Laptop with free mouse",
            trigger_sku="A",
            free_sku="B",
            trigger_quantity=1,
            free_quantity=1,
        )
        assert rule.kind is RuleKind.BUY_X_GET_Y_FREE

    def test_same_trigger_and_free_sku_is_inapplicable(self):
        parameters = {"trigger_sku": "A", "free_sku": "A", "trigger_quantity": 1, "free_quantity": 1}
        assert parse_rule("promo-1", RuleKind.BUY_X_GET_Y_FREE, parameters) is None

    def test_missing_free_sku_is_inapplicable(self):
        parameters = {"trigger_sku": "A", "trigger_quantity": 1, "free_quantity": 1}
        assert parse_rule("promo-1", RuleKind.BUY_X_GET_Y_FREE, parameters) is None

    def test_zero_quantity_is_inapplicable(self):
        parameters = {"trigger_sku": "A", "free_sku": "B", "trigger_quantity": 0, "free_quantity": 1}
        assert parse_rule("promo-1", RuleKind.BUY_X_GET_Y_FREE, parameters) is None


class TestBuyNPayM:
    def test_parse_maps_divisors_to_units(self):
        rule = parse_rule(
            "promo-2",
            "BUY_3_PAY_2",
            {"sku": "G", "min_quantity": 3, "paid_quantity_divisor": 2, "free_quantity_divisor": 1},
        )
        assert isinstance(rule, BuyNPayM)
        assert rule.paid_units == 2
        assert rule.free_units == 1
        assert rule.set_size == 3

    def test_whole_floats_are_accepted(self):
        rule = parse_rule(
            "promo-2",
            "BUY_3_PAY_2",
            {"sku": "G", "min_quantity": 3.0, "paid_quantity_divisor": 2.0, "free_quantity_divisor": 1.0},
        )
        assert rule.min_quantity == 3

    def test_fractional_quantity_is_inapplicable(self):
        parameters = {"sku": "G", "min_quantity": 2.5, "paid_quantity_divisor": 2, "free_quantity_divisor": 1}
        assert parse_rule("promo-2", "BUY_3_PAY_2", parameters) is None

    def test_boolean_is_not_a_number(self):
        parameters = {"sku": "G", "min_quantity": True, "paid_quantity_divisor": 2, "free_quantity_divisor": 1}
        assert parse_rule("promo-2", "BUY_3_PAY_2", parameters) is None

    def test_string_number_is_inapplicable(self):
        parameters = {"sku": "G", "min_quantity": "3", "paid_quantity_divisor": 2, "free_quantity_divisor": 1}
        assert parse_rule("promo-2", "BUY_3_PAY_2", parameters) is None


class TestBulkPercentDiscount:
    def test_parse(self):
        rule = parse_rule("promo-3", "BULK_DISCOUNT", {"sku": "S", "min_quantity": 4, "discount_percentage": 10})
        assert isinstance(rule, BulkPercentDiscount)
        assert rule.discount_percent == Decimal("10")

    def test_fractional_percentage(self):
        rule = parse_rule("promo-3", "BULK_DISCOUNT", {"sku": "S", "min_quantity": 1, "discount_percentage": 12.5})
        assert rule.discount_percent == Decimal("12.5")

    def test_zero_percent_is_inapplicable(self):
        assert parse_rule("promo-3", "BULK_DISCOUNT", {"sku": "S", "min_quantity": 4, "discount_percentage": 0}) is None

    def test_over_hundred_percent_is_inapplicable(self):
        parameters = {"sku": "S", "min_quantity": 4, "discount_percentage": 101}
        assert parse_rule("promo-3", "BULK_DISCOUNT", parameters) is None

    def test_missing_sku_is_inapplicable(self):
        assert parse_rule("promo-3", "BULK_DISCOUNT", {"min_quantity": 4, "discount_percentage": 10}) is None

    def test_blank_sku_is_inapplicable(self):
        parameters = {"sku": "  ", "min_quantity": 4, "discount_percentage": 10}
        assert parse_rule("promo-3", "BULK_DISCOUNT", parameters) is None

    def test_non_finite_percentage_is_inapplicable(self):
        parameters = {"sku": "S", "min_quantity": 4, "discount_percentage": float("nan")}
        assert parse_rule("promo-3", "BULK_DISCOUNT", parameters) is None

    def test_extra_keys_are_ignored(self):
        parameters = {"sku": "S", "min_quantity": 4, "discount_percentage": 10, "channel": "web"}
        assert parse_rule("promo-3", "BULK_DISCOUNT", parameters) is not None


class TestUnusableDocuments:
    def test_unknown_kind(self):
        assert parse_rule("promo-4", "MYSTERY_BOX", {"sku": "S"}) is None

    def test_parameters_must_be_a_mapping(self):
        assert parse_rule("promo-4", "BULK_DISCOUNT", ["S", 4, 10]) is None
        assert parse_rule("promo-4", "BULK_DISCOUNT", None) is None
