"""Checkout aggregate: the immutable record of a converted cart.

A Checkout freezes the cart's lines, the promotions that applied and the
resulting totals at the moment of conversion. Money must balance:

    total          == max(0, subtotal - total_discount)
    total_discount == sum of applied promotion amounts
    sum of line discounts == total_discount (limited to the subtotal)

and no line is ever discounted below zero. Only ``status`` changes after
creation, and that belongs to the order-status workflow.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.checkout.events import CheckoutCompleted
from storefront.domain import storefront
from storefront.pricing.allocation import AllocationStrategy, allocate
from storefront.shared.money import TOLERANCE, amounts_match, to_float


class CheckoutStatus(Enum):
    CREATED = "Created"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


@storefront.entity(part_of="Checkout")
class CheckoutLine:
    """A cart line as it was sold: price, quantity and its share of the discount."""

    position = Integer(required=True, min_value=0)
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_subtotal = Float(required=True, min_value=0.0)
    line_discount = Float(default=0.0, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


@storefront.entity(part_of="Checkout")
class PromotionApplied:
    """A promotion that granted a non-zero discount on this checkout."""

    position = Integer(required=True, min_value=0)
    promotion_id = Identifier(required=True)
    kind = String(required=True, max_length=50)
    description = String(max_length=500)
    discount_amount = Float(required=True, min_value=0.0)


@storefront.aggregate
class Checkout:
    owner_id = Identifier(required=True)
    cart_id = Identifier(required=True, unique=True)
    lines = HasMany(CheckoutLine)
    applied_promotions = HasMany(PromotionApplied)
    subtotal = Float(default=0.0)
    total_discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")
    allocation = String(choices=AllocationStrategy, default=AllocationStrategy.SKU_ATTRIBUTED.value)
    status = String(choices=CheckoutStatus, default=CheckoutStatus.CREATED.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    created_at = DateTime()

    @invariant.post
    def totals_must_balance(self):
        promotions_total = sum(p.discount_amount for p in self.applied_promotions)
        if not amounts_match(self.total_discount, promotions_total):
            raise ValidationError({"total_discount": ["Total discount must equal the sum of applied promotions"]})
        if not amounts_match(self.subtotal, sum(line.line_subtotal for line in self.lines)):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line subtotals"]})
        if not amounts_match(self.total, max(0.0, self.subtotal - self.total_discount)):
            raise ValidationError({"total": ["Total must equal subtotal less discount, and never be negative"]})

    @invariant.post
    def line_discounts_must_match_total(self):
        for line in self.lines:
            if line.line_discount > line.line_subtotal + TOLERANCE:
                raise ValidationError({"lines": [f"Discount on {line.sku} exceeds its subtotal"]})
        allocated = sum(line.line_discount for line in self.lines)
        if not amounts_match(allocated, min(self.total_discount, self.subtotal)):
            raise ValidationError({"lines": ["Line discounts must add up to the total discount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id, cart_id, result, allocation=AllocationStrategy.SKU_ATTRIBUTED, currency="USD"):
        """Build a checkout from a priced cart.

        Args:
            owner_id: Owner of the converted cart.
            cart_id: The converted cart; a cart yields at most one checkout.
            result: ``PromotionResult`` of pricing the cart's lines.
            allocation: How the discount is spread over the lines.
            currency: ISO currency code of the amounts.
        """
        allocation = AllocationStrategy(allocation)
        line_discounts = allocate(result, allocation)
        now = datetime.now(UTC)

        checkout = cls(
            owner_id=owner_id,
            cart_id=cart_id,
            currency=currency,
            allocation=allocation.value,
            status=CheckoutStatus.CREATED.value,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
        )

        with atomic_change(checkout):
            for position, (line, discount) in enumerate(zip(result.lines, line_discounts, strict=True)):
                checkout.add_lines(
                    CheckoutLine(
                        position=position,
                        product_id=line.product_id,
                        sku=line.sku,
                        name=line.name,
                        quantity=line.quantity,
                        unit_price=float(line.unit_price),
                        line_subtotal=to_float(line.charged_subtotal),
                        line_discount=to_float(discount),
                        line_total=to_float(line.charged_subtotal - discount),
                    )
                )
            for position, applied in enumerate(result.applied):
                checkout.add_applied_promotions(
                    PromotionApplied(
                        position=position,
                        promotion_id=applied.rule_id,
                        kind=applied.kind,
                        description=applied.description,
                        discount_amount=to_float(applied.discount_amount),
                    )
                )
            checkout.subtotal = to_float(result.subtotal)
            checkout.total_discount = to_float(result.total_discount)
            checkout.total = to_float(result.total)

        checkout.raise_(
            CheckoutCompleted(
                checkout_id=str(checkout.id),
                owner_id=str(owner_id),
                cart_id=str(cart_id),
                subtotal=checkout.subtotal,
                total_discount=checkout.total_discount,
                total=checkout.total,
                currency=currency,
                item_count=len(result.lines),
                promotion_count=len(result.applied),
                created_at=now,
            )
        )
        return checkout

    def ordered_lines(self):
        return sorted(self.lines, key=lambda line: line.position)

    def ordered_promotions(self):
        return sorted(self.applied_promotions, key=lambda promotion: promotion.position)
