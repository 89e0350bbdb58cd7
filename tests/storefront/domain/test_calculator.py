"""Tests for the per-kind discount calculators."""

from decimal import Decimal

from storefront.pricing.calculator import calculate
from storefront.pricing.lines import CartLine
from storefront.pricing.matching import LineIndex, match
from storefront.pricing.rules import BulkPercentDiscount, BuyNPayM, BuyXGetYFree


def _line(sku, quantity, price, product_id=None):
    return CartLine(product_id=product_id or f"prod-{sku}", sku=sku, quantity=quantity, unit_price=Decimal(price))


def _discount(rule, lines):
    index = LineIndex(lines)
    return calculate(match(rule, index), index)


def _bxgy(trigger_quantity=1, free_quantity=1):
    return BuyXGetYFree(
        rule_id="r1",
        description="",
        trigger_sku="A",
        free_sku="B",
        trigger_quantity=trigger_quantity,
        free_quantity=free_quantity,
    )


def _buy_n_pay_m(min_quantity=3, paid_units=2, free_units=1):
    return BuyNPayM(
        rule_id="r2", description="", sku="G", min_quantity=min_quantity, paid_units=paid_units, free_units=free_units
    )


def _bulk(percent, min_quantity=4):
    return BulkPercentDiscount(
        rule_id="r3", description="", sku="S", min_quantity=min_quantity, discount_percent=Decimal(percent)
    )


class TestBuyXGetYFree:
    def test_one_free_unit_for_one_trigger(self):
        discount = _discount(_bxgy(), [_line("A", 1, "5000"), _line("B", 1, "30")])
        assert discount.amount == Decimal("30")
        assert discount.line_amounts == {1: Decimal("30")}
        assert discount.summary == "Free: 1 x B"

    def test_free_units_limited_to_reward_quantity_in_cart(self):
        discount = _discount(_bxgy(), [_line("A", 4, "10"), _line("B", 1, "3")])
        assert discount.amount == Decimal("3")

    def test_incomplete_trigger_set_grants_nothing(self):
        discount = _discount(_bxgy(trigger_quantity=2), [_line("A", 1, "10"), _line("B", 1, "3")])
        assert discount.amount == Decimal("0")

    def test_complete_sets_only(self):
        discount = _discount(_bxgy(trigger_quantity=2), [_line("A", 5, "10"), _line("B", 5, "3")])
        assert discount.amount == Decimal("6")
        assert discount.summary == "Free: 2 x B"

    def test_free_units_taken_from_reward_lines_in_order(self):
        lines = [
            _line("A", 3, "10"),
            _line("B", 1, "4", product_id="prod-B1"),
            _line("B", 5, "2", product_id="prod-B2"),
        ]
        discount = _discount(_bxgy(), lines)
        assert discount.amount == Decimal("8")
        assert discount.line_amounts == {1: Decimal("4"), 2: Decimal("4")}


class TestBuyNPayM:
    def test_three_for_two(self):
        discount = _discount(_buy_n_pay_m(), [_line("G", 3, "50")])
        assert discount.amount == Decimal("50")
        assert discount.summary == "Pay 2 get 1 free: 1 x G"

    def test_only_complete_sets_count(self):
        discount = _discount(_buy_n_pay_m(), [_line("G", 7, "50")])
        assert discount.amount == Decimal("100")

    def test_quantities_of_all_lines_of_the_sku_are_pooled(self):
        lines = [_line("G", 2, "50"), _line("G", 1, "50", product_id="prod-G2")]
        discount = _discount(_buy_n_pay_m(), lines)
        assert discount.amount == Decimal("50")
        assert discount.line_amounts == {0: Decimal("50")}

    def test_min_quantity_above_set_size(self):
        discount = _discount(_buy_n_pay_m(min_quantity=6), [_line("G", 6, "10")])
        assert discount.amount == Decimal("20")

    def test_minimum_met_but_no_complete_set(self):
        discount = _discount(_buy_n_pay_m(min_quantity=1, paid_units=3, free_units=1), [_line("G", 2, "10")])
        assert discount.amount == Decimal("0")


class TestBulkPercentDiscount:
    def test_ten_percent_of_four_hundred(self):
        discount = _discount(_bulk(10), [_line("S", 4, "100")])
        assert discount.amount == Decimal("40")
        assert discount.summary == "10% off S"

    def test_rounds_half_up_once(self):
        discount = _discount(_bulk("12.5", min_quantity=1), [_line("S", 1, "0.04")])
        assert discount.amount == Decimal("0.01")

    def test_full_discount_equals_subtotal(self):
        discount = _discount(_bulk(100, min_quantity=1), [_line("S", 3, "9.99")])
        assert discount.amount == Decimal("29.97")
        assert discount.line_amounts == {0: Decimal("29.97")}

    def test_attribution_sums_to_amount(self):
        lines = [_line("S", 1, "3.33"), _line("S", 1, "3.33", product_id="prod-S2"), _line("S", 2, "1.67", "prod-S3")]
        discount = _discount(_bulk(15), lines)
        assert sum(discount.line_amounts.values()) == discount.amount


class TestSubCentPrices:
    def test_rounded_amount_is_fully_attributed(self):
        discount = _discount(_bxgy(), [_line("A", 1, "1.00"), _line("B", 1, "0.005")])
        assert discount.amount == Decimal("0.01")
        assert discount.line_amounts == {1: Decimal("0.01")}

    def test_attribution_never_exceeds_the_billed_line(self):
        lines = [_line("A", 2, "0.50"), _line("B", 1, "0.004"), _line("B", 1, "0.004", product_id="prod-B2")]
        discount = _discount(_bxgy(), lines)
        assert discount.amount == Decimal("0.01")
        assert all(amount == Decimal("0") for amount in discount.line_amounts.values())
