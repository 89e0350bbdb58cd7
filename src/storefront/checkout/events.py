"""Domain events for the Checkout aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Checkout")
class CheckoutCompleted:
    """A cart was converted into a checkout with its promotions fixed."""

    __version__ = 1

    checkout_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    subtotal = Float(required=True)
    total_discount = Float(required=True)
    total = Float(required=True)
    currency = String(max_length=3, default="USD")
    item_count = Integer(required=True)
    promotion_count = Integer(required=True)
    created_at = DateTime(required=True)
