"""Cart line input for the pricing engine."""

from dataclasses import dataclass
from decimal import Decimal

from storefront.shared.money import round_money, to_decimal


@dataclass(frozen=True)
class CartLine:
    """A priced cart line as seen by the promotion engine.

    Lines are read-only inputs: the engine never mutates them, and every
    promotion is evaluated against the same, original quantities.
    """

    product_id: str
    sku: str
    quantity: int
    unit_price: Decimal
    name: str = ""

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Cart line quantity must be positive, got {self.quantity}")
        price = to_decimal(self.unit_price)
        if price < 0:
            raise ValueError(f"Cart line unit price must not be negative, got {price}")
        object.__setattr__(self, "unit_price", price)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def charged_subtotal(self) -> Decimal:
        """What the line is billed: its subtotal rounded to the minor unit."""
        return round_money(self.subtotal)
