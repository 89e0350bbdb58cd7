"""Shopping Cart aggregate: the owner's priced selection prior to checkout.

Each owner has at most one active cart. Items carry the SKU, name and unit
price captured when they were added, which is all the promotion engine needs
to price the cart. Checkout soft-clears the cart: its items are removed and
it is marked checked out, so it can never be converted a second time. The
owner's next addition opens a fresh cart.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCheckedOut,
    CartCreated,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.domain import storefront
from storefront.pricing.lines import CartLine

_EPOCH = datetime.min.replace(tzinfo=UTC)


class CartStatus(Enum):
    ACTIVE = "Active"
    CHECKED_OUT = "Checked_Out"


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    owner_id = Identifier(required=True)
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()
    checked_out_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = datetime.now(UTC)
        cart = cls(
            owner_id=owner_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(CartCreated(cart_id=str(cart.id), owner_id=str(owner_id)))
        return cart

    def _assert_active(self, action):
        if CartStatus(self.status) != CartStatus.ACTIVE:
            raise ValidationError({"status": [f"{action} is only allowed on an active cart"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, sku, name, unit_price, quantity):
        """Add a product to the cart (or increase its quantity if already present).

        The price and SKU captured on the first addition are kept when the
        same product is added again.
        """
        self._assert_active("Adding items")

        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                sku=sku,
                name=name,
                unit_price=unit_price,
                quantity=quantity,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                sku=item.sku,
                quantity=quantity,
                unit_price=item.unit_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity):
        self._assert_active("Updating item quantities")

        item = self._find_item(item_id)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        self._assert_active("Removing items")

        item = self._find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    # -------------------------------------------------------------------
    # Pricing view
    # -------------------------------------------------------------------
    def lines(self):
        """The cart's items as pricing-engine lines, in the order they were added."""
        ordered = sorted(self.items, key=lambda i: i.added_at or _EPOCH)
        return [
            CartLine(
                product_id=str(item.product_id),
                sku=item.sku,
                name=item.name or "",
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in ordered
        ]

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out(self):
        """Soft-clear the cart once its contents were converted to a checkout."""
        self._assert_active("Checking out")

        item_count = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.status = CartStatus.CHECKED_OUT.value
        self.checked_out_at = now
        self.updated_at = now

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                item_count=item_count,
                checked_out_at=now,
            )
        )
