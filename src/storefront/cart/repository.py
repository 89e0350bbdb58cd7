"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    """Owner-scoped access to carts.

    An owner has at most one active cart; checked-out carts stay in storage
    as the soft-cleared source of their checkout.
    """

    def active_for_owner(self, owner_id) -> ShoppingCart | None:
        """The owner's active cart, or None when the owner has no open cart."""
        carts = self._dao.query.filter(owner_id=str(owner_id), status=CartStatus.ACTIVE.value).all().items
        if not carts:
            return None
        return self.get(carts[0].id)

    def lines_for_owner(self, owner_id) -> list:
        """Priced lines of the owner's active cart; empty when there is none."""
        cart = self.active_for_owner(owner_id)
        return cart.lines() if cart else []

    def clear_for_owner(self, owner_id) -> None:
        """Soft-clear every active cart of the owner."""
        carts = self._dao.query.filter(owner_id=str(owner_id), status=CartStatus.ACTIVE.value).all().items
        for record in carts:
            cart = self.get(record.id)
            cart.check_out()
            self.add(cart)
