"""Checkout processor: converts a cart into a Checkout in one unit of work.

The conversion runs these steps inside a single transaction:

    1. Load the cart (by owner, or by cart id)
    2. Reject empty, unknown or already converted carts
    3. Load active promotions in listing order and apply them
    4. Build and persist the Checkout with its allocated line discounts
    5. Soft-clear the owner's cart

Any failure rolls the whole unit of work back, so a cart is either
converted and cleared, or left exactly as it was. A cart converts at most
once: the checked-out flag on the cart, the unique ``cart_id`` on the
checkout and the cart's row version each stop a second conversion, and a
conflict detected at commit is reported as ``AlreadyCheckedOut``. Storage
without real transactions gets per-owner serialization instead.
"""

import time
from contextlib import nullcontext
from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean import current_domain
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError
from protean.port.provider import DatabaseCapabilities

from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.checkout.checkout import Checkout
from storefront.checkout.errors import (
    AlreadyCheckedOut,
    CheckoutError,
    EmptyCart,
    InvalidOwnerReference,
    PersistenceFailure,
)
from storefront.checkout.guard import conversion_guard
from storefront.pricing.allocation import AllocationStrategy, allocate
from storefront.pricing.engine import AppliedPromotion, apply_promotions
from storefront.promotion.promotion import Promotion
from storefront.promotion.repository import DEFAULT_LISTING_LIMIT
from storefront.shared.money import ZERO, round_money

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    sku: str
    name: str
    quantity: int
    unit_price: Decimal
    line_subtotal: Decimal
    line_discount: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.line_subtotal - self.line_discount


@dataclass(frozen=True)
class CartPricing:
    """Read-only preview of what checking out a cart would produce."""

    owner_id: str
    cart_id: str | None
    lines: tuple[PricedLine, ...]
    applied: tuple[AppliedPromotion, ...]
    subtotal: Decimal
    total_discount: Decimal
    total: Decimal
    currency: str
    allocation: AllocationStrategy

    @property
    def is_empty(self) -> bool:
        return not self.lines


def _custom_setting(name, default):
    custom = current_domain.config.get("custom") or {}
    return custom.get(name, default)


def _reference(value, label):
    reference = str(value).strip() if value is not None else ""
    if not reference:
        raise InvalidOwnerReference(f"A valid {label} is required", **{label: value})
    return reference


class CheckoutProcessor:
    """Runs the cart-to-checkout conversion.

    Collaborators default to the storefront's repositories and Protean's
    ``UnitOfWork``; tests pass their own to observe or break the flow.
    """

    def __init__(
        self,
        carts=None,
        promotions=None,
        checkouts=None,
        unit_of_work=UnitOfWork,
        logger=None,
        currency=None,
        listing_limit=None,
        guard=None,
    ):
        self._carts = carts
        self._promotions = promotions
        self._checkouts = checkouts
        self.unit_of_work = unit_of_work
        self.guard = guard if guard is not None else conversion_guard
        self.logger = logger if logger is not None else structlog.get_logger(__name__)
        self._currency = currency
        self._listing_limit = listing_limit

    # -------------------------------------------------------------------
    # Collaborators
    # -------------------------------------------------------------------
    @property
    def carts(self):
        return self._carts or current_domain.repository_for(ShoppingCart)

    @property
    def promotions(self):
        return self._promotions or current_domain.repository_for(Promotion)

    @property
    def checkouts(self):
        return self._checkouts or current_domain.repository_for(Checkout)

    @property
    def currency(self):
        return self._currency or _custom_setting("currency", DEFAULT_CURRENCY)

    @property
    def listing_limit(self):
        return self._listing_limit or _custom_setting("promotion_listing_limit", DEFAULT_LISTING_LIMIT)

    # -------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------
    def process_for_owner(self, owner_id, allocation=AllocationStrategy.SKU_ATTRIBUTED) -> Checkout:
        """Convert the owner's active cart into a checkout.

        Raises:
            InvalidOwnerReference: ``owner_id`` is blank.
            EmptyCart: the owner has no active cart, or it holds no items.
            PersistenceFailure: storage failed; nothing was written.
        """
        owner_id = _reference(owner_id, "owner_id")
        log = self.logger.bind(method="CheckoutProcessor.process_for_owner", owner_id=owner_id)

        def load():
            cart = self.carts.active_for_owner(owner_id)
            if cart is None or not cart.items:
                raise EmptyCart("Cart is empty", owner_id=owner_id)
            return cart

        return self._run(lambda: owner_id, load, AllocationStrategy(allocation), log)

    def process_for_cart(self, cart_id, allocation=AllocationStrategy.PROPORTIONAL) -> Checkout:
        """Convert a specific cart into a checkout.

        Raises:
            InvalidOwnerReference: ``cart_id`` is blank or names no cart.
            AlreadyCheckedOut: the cart was converted before.
            EmptyCart: the cart holds no items.
            PersistenceFailure: storage failed; nothing was written.
        """
        cart_id = _reference(cart_id, "cart_id")
        log = self.logger.bind(method="CheckoutProcessor.process_for_cart", cart_id=cart_id)

        def find():
            try:
                return self.carts.get(cart_id)
            except ObjectNotFoundError as exc:
                raise InvalidOwnerReference("Cart not found", cart_id=cart_id) from exc

        def load():
            cart = find()
            if CartStatus(cart.status) == CartStatus.CHECKED_OUT or self.checkouts.exists_for_cart(cart_id):
                raise AlreadyCheckedOut("Cart has already been checked out", cart_id=cart_id)
            if not cart.items:
                raise EmptyCart("Cart is empty", cart_id=cart_id)
            return cart

        return self._run(lambda: str(find().owner_id), load, AllocationStrategy(allocation), log)

    def _run(self, owner_of, load, allocation, log):
        log.info("Processing cart for checkout")
        started = time.perf_counter()

        try:
            with self._isolation(owner_of()), self.unit_of_work():
                cart = load()
                checkout = self._convert(cart, allocation, log)
        except CheckoutError as exc:
            log.warning("Checkout rejected", error=exc.code, reason=exc.message)
            raise
        except ValidationError as exc:
            if "cart_id" in exc.messages:
                raise self._conflict(log, exc) from exc
            log.error("Checkout could not be recorded", error=str(exc.messages))
            raise PersistenceFailure("Checkout could not be recorded") from exc
        except ExpectedVersionError as exc:
            # The cart changed underneath us: another conversion won
            raise self._conflict(log, exc) from exc
        except TransactionError as exc:
            if "cart_id" in str(exc):
                raise self._conflict(log, exc) from exc
            log.error("Checkout could not be recorded", error=str(exc))
            raise PersistenceFailure("Checkout could not be recorded") from exc
        except Exception as exc:
            log.error("Checkout could not be recorded", error=str(exc))
            raise PersistenceFailure("Checkout could not be recorded") from exc

        log.info(
            "Checkout committed",
            checkout_id=str(checkout.id),
            cart_id=str(checkout.cart_id),
            subtotal=checkout.subtotal,
            total_discount=checkout.total_discount,
            total=checkout.total,
            promotion_count=len(checkout.applied_promotions),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return checkout

    def _isolation(self, owner_id):
        """Per-owner serialization, only where storage cannot isolate transactions."""
        provider = current_domain.providers[Checkout.meta_.provider]
        if provider.has_capability(DatabaseCapabilities.TRANSACTIONS):
            return nullcontext()
        return self.guard.hold(owner_id)

    @staticmethod
    def _conflict(log, exc):
        log.warning("Checkout rejected", error=AlreadyCheckedOut.code, reason=str(exc))
        return AlreadyCheckedOut("Cart has already been checked out")

    def _convert(self, cart, allocation, log):
        result = apply_promotions(cart.lines(), self._active_rules(log))
        for rule_id in result.skipped:
            log.warning("Promotion skipped after a calculation error", promotion_id=str(rule_id))

        checkout = Checkout.create(
            owner_id=cart.owner_id,
            cart_id=cart.id,
            result=result,
            allocation=allocation,
            currency=self.currency,
        )
        self.checkouts.add(checkout)
        self.carts.clear_for_owner(cart.owner_id)
        return checkout

    def _active_rules(self, log):
        rules = []
        for promotion in self.promotions.list_active(limit=self.listing_limit):
            rule = promotion.to_rule()
            if rule is None:
                log.warning("Ignoring promotion with unusable rule", promotion_id=str(promotion.id), kind=promotion.kind)
                continue
            rules.append(rule)
        return rules

    # -------------------------------------------------------------------
    # Preview
    # -------------------------------------------------------------------
    def price_cart(self, owner_id, allocation=AllocationStrategy.SKU_ATTRIBUTED) -> CartPricing:
        """Price the owner's active cart without converting it.

        An owner without an active cart gets an empty pricing.
        """
        owner_id = _reference(owner_id, "owner_id")
        allocation = AllocationStrategy(allocation)
        log = self.logger.bind(method="CheckoutProcessor.price_cart", owner_id=owner_id)

        cart = self.carts.active_for_owner(owner_id)
        lines = cart.lines() if cart else []
        result = apply_promotions(lines, self._active_rules(log) if lines else [])
        discounts = allocate(result, allocation)

        priced = tuple(
            PricedLine(
                product_id=line.product_id,
                sku=line.sku,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_subtotal=line.charged_subtotal,
                line_discount=discount,
            )
            for line, discount in zip(result.lines, discounts, strict=True)
        )
        subtotal = round_money(result.subtotal)
        total_discount = round_money(result.total_discount)
        return CartPricing(
            owner_id=owner_id,
            cart_id=str(cart.id) if cart else None,
            lines=priced,
            applied=result.applied,
            subtotal=subtotal,
            total_discount=total_discount,
            total=max(ZERO, subtotal - total_discount),
            currency=self.currency,
            allocation=allocation,
        )
