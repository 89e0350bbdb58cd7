"""In-memory stock checker for development and testing.

SKUs without a configured level are treated as unlimited, so carts can be
filled freely unless a test pins a SKU's stock with ``set_level``.
"""

from storefront.inventory.port import StockChecker


class InMemoryStock(StockChecker):
    """Configurable in-memory stock levels."""

    def __init__(self, levels: dict[str, int] | None = None) -> None:
        self.levels: dict[str, int] = dict(levels or {})
        self.calls: list[dict] = []

    def set_level(self, sku: str, quantity: int) -> None:
        self.levels[sku] = quantity

    def has_stock(self, sku: str, quantity: int) -> bool:
        self.calls.append({"sku": sku, "quantity": quantity})
        if sku not in self.levels:
            return True
        return self.levels[sku] >= quantity
