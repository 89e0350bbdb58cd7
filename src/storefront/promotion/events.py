"""Domain events for the Promotion aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Promotion")
class PromotionCreated:
    """A promotion rule was authored."""

    __version__ = 1

    promotion_id = Identifier(required=True)
    kind = String(required=True, max_length=50)
    description = String(max_length=255)
    rule = Text(required=True)  # JSON rule document
    active = Boolean(default=True)


@storefront.event(part_of="Promotion")
class PromotionActivated:
    __version__ = 1

    promotion_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@storefront.event(part_of="Promotion")
class PromotionDeactivated:
    __version__ = 1

    promotion_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
