"""Stock availability port (abstract interface).

The storefront does not keep inventory itself; it only asks whether a SKU
has at least a given quantity on hand before it lets that quantity into a
cart. Adapters answer the question against the inventory system of record.
"""

from abc import ABC, abstractmethod


class StockChecker(ABC):
    """Abstract stock availability interface."""

    @abstractmethod
    def has_stock(self, sku: str, quantity: int) -> bool:
        """Return True when ``sku`` has at least ``quantity`` units available."""
        ...
