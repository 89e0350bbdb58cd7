"""Tests for spreading a cart discount over its lines."""

from decimal import Decimal

from storefront.pricing.allocation import (
    AllocationStrategy,
    allocate,
    allocate_by_sku,
    allocate_proportionally,
)
from storefront.pricing.engine import apply_promotions
from storefront.pricing.lines import CartLine
from storefront.pricing.rules import BulkPercentDiscount, BuyXGetYFree


def _line(sku, quantity, price):
    return CartLine(product_id=f"prod-{sku}", sku=sku, quantity=quantity, unit_price=Decimal(price))


def _bulk(rule_id, sku, percent):
    return BulkPercentDiscount(
        rule_id=rule_id, description="", sku=sku, min_quantity=1, discount_percent=Decimal(percent)
    )


def _priced(rules):
    return apply_promotions([_line("A", 2, "10"), _line("B", 1, "10")], rules)


class TestSkuAttributed:
    def test_discount_stays_on_matched_lines(self):
        assert allocate_by_sku(_priced([_bulk("r1", "A", 50)])) == (Decimal("10.00"), Decimal("0"))

    def test_overflow_spills_onto_other_lines(self):
        result = _priced([_bulk("r1", "A", 100), _bulk("r2", "A", 100)])
        allotted = allocate_by_sku(result)
        assert allotted == (Decimal("20"), Decimal("10.00"))
        assert sum(allotted) == result.subtotal


class TestProportional:
    def test_split_by_share_of_subtotal(self):
        allotted = allocate_proportionally(_priced([_bulk("r1", "A", 50)]))
        assert allotted == (Decimal("6.67"), Decimal("3.33"))

    def test_no_discount(self):
        assert allocate_proportionally(_priced([])) == (Decimal("0.00"), Decimal("0.00"))

    def test_capped_at_subtotal(self):
        result = _priced([_bulk("r1", "A", 100), _bulk("r2", "A", 100)])
        assert sum(allocate_proportionally(result)) == Decimal("30")


class TestStrategySelection:
    def test_dispatch_by_name(self):
        result = _priced([_bulk("r1", "A", 50)])
        assert allocate(result, AllocationStrategy.PROPORTIONAL) == allocate_proportionally(result)
        assert allocate(result, "SKU_Attributed") == allocate_by_sku(result)

    def test_empty_cart(self):
        result = apply_promotions([], [])
        assert allocate(result, AllocationStrategy.PROPORTIONAL) == ()
        assert allocate(result, AllocationStrategy.SKU_ATTRIBUTED) == ()


class TestSubCentLines:
    def _result(self):
        rule = BuyXGetYFree(
            rule_id="r1", description="", trigger_sku="A", free_sku="B", trigger_quantity=1, free_quantity=1
        )
        lines = [_line("A", 2, "0.50"), _line("B", 1, "0.004"), _line("B", 1, "0.004")]
        return apply_promotions(lines, [rule])

    def test_subtotal_is_the_sum_of_billed_lines(self):
        assert self._result().subtotal == Decimal("1.00")

    def test_uncovered_cent_moves_to_a_line_with_room(self):
        result = self._result()
        allotted = allocate_by_sku(result)
        assert allotted == (Decimal("0.01"), Decimal("0"), Decimal("0"))
        assert sum(allotted) == result.total_discount

    def test_proportional_respects_billed_subtotals(self):
        assert allocate_proportionally(self._result()) == (Decimal("0.01"), Decimal("0"), Decimal("0"))
