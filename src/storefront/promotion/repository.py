"""Repository for the Promotion aggregate."""

from storefront.domain import storefront
from storefront.promotion.promotion import Promotion

DEFAULT_LISTING_LIMIT = 100


@storefront.repository(part_of=Promotion)
class PromotionRepository:
    """Listing order is creation order, and pricing relies on it being stable."""

    def list_active(self, limit: int = DEFAULT_LISTING_LIMIT) -> list[Promotion]:
        """Active promotions, oldest first."""
        return self._dao.query.filter(active=True).order_by("created_at").limit(limit).all().items

    def list_page(self, page: int = 1, limit: int = 10, active: bool | None = None):
        """One page of promotions, optionally filtered by status.

        Returns a ``(promotions, total)`` pair.
        """
        query = self._dao.query
        if active is not None:
            query = query.filter(active=active)
        results = query.order_by("created_at").offset((page - 1) * limit).limit(limit).all()
        return results.items, results.total

    def remove(self, promotion: Promotion) -> None:
        """Delete a promotion. Checkouts keep their own record of what it granted."""
        self._dao.delete(promotion)
