"""Tests for the stock checker port and its in-memory adapter."""

from storefront.inventory import get_stock_checker, reset_stock_checker, set_stock_checker
from storefront.inventory.fake_adapter import InMemoryStock


class TestInMemoryStock:
    def test_unknown_sku_is_unlimited(self):
        assert InMemoryStock().has_stock("SKU-A", 1000)

    def test_pinned_level(self):
        stock = InMemoryStock()
        stock.set_level("SKU-A", 2)
        assert stock.has_stock("SKU-A", 2)
        assert not stock.has_stock("SKU-A", 3)
        assert stock.calls == [{"sku": "SKU-A", "quantity": 2}, {"sku": "SKU-A", "quantity": 3}]


class TestStockCheckerFactory:
    def test_default_is_in_memory(self):
        assert isinstance(get_stock_checker(), InMemoryStock)

    def test_override_and_reset(self):
        custom = InMemoryStock({"SKU-A": 0})
        set_stock_checker(custom)
        assert get_stock_checker() is custom

        reset_stock_checker()
        assert get_stock_checker() is not custom
