"""Repository for the Checkout aggregate."""

from storefront.checkout.checkout import Checkout
from storefront.domain import storefront


@storefront.repository(part_of=Checkout)
class CheckoutRepository:
    def exists_for_cart(self, cart_id) -> bool:
        """True when a checkout was already recorded for ``cart_id``."""
        return bool(self._dao.query.filter(cart_id=str(cart_id)).all().items)

    def for_owner(self, owner_id, page: int = 1, limit: int = 10):
        """One page of the owner's checkouts, newest first.

        Returns a ``(checkouts, total)`` pair.
        """
        results = (
            self._dao.query.filter(owner_id=str(owner_id))
            .order_by("-created_at")
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return results.items, results.total
