"""Stock checker factory.

Provides get_stock_checker() / set_stock_checker() to swap implementations:
- InMemoryStock for development and testing
- an adapter for the inventory system of record in production
"""

from storefront.inventory.fake_adapter import InMemoryStock
from storefront.inventory.port import StockChecker

_current_checker: StockChecker | None = None


def get_stock_checker() -> StockChecker:
    """Return the current stock checker. Defaults to InMemoryStock."""
    global _current_checker
    if _current_checker is None:
        _current_checker = InMemoryStock()
    return _current_checker


def set_stock_checker(checker: StockChecker) -> None:
    """Override the active stock checker (useful for tests)."""
    global _current_checker
    _current_checker = checker


def reset_stock_checker() -> None:
    """Reset to the default stock checker."""
    global _current_checker
    _current_checker = None
