"""FastAPI routes for the Storefront: carts, promotions and checkouts."""

import json

from fastapi import APIRouter
from protean import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    AppliedPromotionResponse,
    CartIdResponse,
    CartLineResponse,
    CartResponse,
    CheckoutIdResponse,
    CheckoutListResponse,
    CheckoutRequest,
    CheckoutResponse,
    CreatePromotionRequest,
    PromotionIdResponse,
    PromotionListResponse,
    PromotionResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.checkout.checkout import Checkout
from storefront.checkout.processor import CheckoutProcessor
from storefront.promotion.management import (
    ActivatePromotion,
    CreatePromotion,
    DeactivatePromotion,
    DeletePromotion,
)
from storefront.promotion.promotion import Promotion

DEFAULT_PAGE_SIZE = 10


def page_window(page: int, limit: int) -> tuple[int, int]:
    """Clamp paging input: pages start at 1, a non-positive limit means the default."""
    return max(page, 1), limit if limit >= 1 else DEFAULT_PAGE_SIZE


def _checkout_response(checkout) -> CheckoutResponse:
    return CheckoutResponse(
        checkout_id=str(checkout.id),
        owner_id=str(checkout.owner_id),
        cart_id=str(checkout.cart_id),
        status=checkout.status,
        payment_status=checkout.payment_status,
        currency=checkout.currency,
        allocation=checkout.allocation,
        subtotal=checkout.subtotal,
        total_discount=checkout.total_discount,
        total=checkout.total,
        lines=[
            CartLineResponse(
                product_id=str(line.product_id),
                sku=line.sku,
                name=line.name or "",
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_subtotal=line.line_subtotal,
                line_discount=line.line_discount,
                line_total=line.line_total,
            )
            for line in checkout.ordered_lines()
        ],
        applied_promotions=[
            AppliedPromotionResponse(
                promotion_id=str(applied.promotion_id),
                kind=applied.kind,
                description=applied.description or "",
                discount_amount=applied.discount_amount,
            )
            for applied in checkout.ordered_promotions()
        ],
        created_at=checkout.created_at,
    )


def _promotion_response(promotion) -> PromotionResponse:
    return PromotionResponse(
        promotion_id=str(promotion.id),
        kind=promotion.kind,
        description=promotion.description or "",
        rule=promotion.parameters(),
        active=promotion.active,
        created_at=promotion.created_at,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("/{owner_id}/items", status_code=201, response_model=CartIdResponse)
async def add_cart_item(owner_id: str, body: AddToCartRequest) -> CartIdResponse:
    command = AddToCart(
        owner_id=owner_id,
        product_id=body.product_id,
        sku=body.sku,
        name=body.name,
        unit_price=body.unit_price,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.put("/{owner_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(owner_id: str, item_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(owner_id=owner_id, item_id=item_id, new_quantity=body.new_quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{owner_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(owner_id: str, item_id: str) -> StatusResponse:
    command = RemoveFromCart(owner_id=owner_id, item_id=item_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.get("/{owner_id}", response_model=CartResponse)
async def get_cart(owner_id: str) -> CartResponse:
    """The owner's active cart, priced with the currently active promotions."""
    pricing = CheckoutProcessor().price_cart(owner_id)
    return CartResponse(
        owner_id=pricing.owner_id,
        cart_id=pricing.cart_id,
        items=[
            CartLineResponse(
                product_id=line.product_id,
                sku=line.sku,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_subtotal=line.line_subtotal,
                line_discount=line.line_discount,
                line_total=line.line_total,
            )
            for line in pricing.lines
        ],
        applied_promotions=[
            AppliedPromotionResponse(
                promotion_id=str(applied.rule_id),
                kind=applied.kind,
                description=applied.description,
                discount_amount=applied.discount_amount,
            )
            for applied in pricing.applied
        ],
        subtotal=pricing.subtotal,
        total_discount=pricing.total_discount,
        total=pricing.total,
        currency=pricing.currency,
    )


@cart_router.post("/by-id/{cart_id}/checkout", status_code=201, response_model=CheckoutIdResponse)
async def checkout_cart(cart_id: str) -> CheckoutIdResponse:
    checkout = CheckoutProcessor().process_for_cart(cart_id)
    return CheckoutIdResponse(
        checkout_id=str(checkout.id),
        subtotal=checkout.subtotal,
        total_discount=checkout.total_discount,
        total=checkout.total,
    )


# ---------------------------------------------------------------------------
# Promotion Router
# ---------------------------------------------------------------------------
promotion_router = APIRouter(prefix="/promotions", tags=["promotions"])


@promotion_router.post("", status_code=201, response_model=PromotionIdResponse)
async def create_promotion(body: CreatePromotionRequest) -> PromotionIdResponse:
    command = CreatePromotion(
        kind=body.kind,
        description=body.description,
        rule=json.dumps(body.rule),
        active=body.active,
    )
    result = current_domain.process(command, asynchronous=False)
    return PromotionIdResponse(promotion_id=result)


@promotion_router.get("", response_model=PromotionListResponse)
async def list_promotions(active: bool | None = None, page: int = 1, limit: int = DEFAULT_PAGE_SIZE):
    page, limit = page_window(page, limit)
    promotions, total = current_domain.repository_for(Promotion).list_page(page=page, limit=limit, active=active)
    return PromotionListResponse(
        items=[_promotion_response(promotion) for promotion in promotions],
        total=total,
        page=page,
        limit=limit,
    )


@promotion_router.get("/{promotion_id}", response_model=PromotionResponse)
async def get_promotion(promotion_id: str) -> PromotionResponse:
    return _promotion_response(current_domain.repository_for(Promotion).get(promotion_id))


@promotion_router.put("/{promotion_id}/activate", response_model=StatusResponse)
async def activate_promotion(promotion_id: str) -> StatusResponse:
    current_domain.process(ActivatePromotion(promotion_id=promotion_id), asynchronous=False)
    return StatusResponse()


@promotion_router.put("/{promotion_id}/deactivate", response_model=StatusResponse)
async def deactivate_promotion(promotion_id: str) -> StatusResponse:
    current_domain.process(DeactivatePromotion(promotion_id=promotion_id), asynchronous=False)
    return StatusResponse()


@promotion_router.delete("/{promotion_id}", response_model=StatusResponse)
async def delete_promotion(promotion_id: str) -> StatusResponse:
    current_domain.process(DeletePromotion(promotion_id=promotion_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(tags=["checkouts"])


@checkout_router.post("/checkouts", status_code=201, response_model=CheckoutIdResponse)
async def create_checkout(body: CheckoutRequest) -> CheckoutIdResponse:
    """Convert the owner's active cart into a checkout.

    1. Price the cart with all active promotions
    2. Record the checkout with per-line discounts
    3. Clear the cart
    """
    checkout = CheckoutProcessor().process_for_owner(body.owner_id)
    return CheckoutIdResponse(
        checkout_id=str(checkout.id),
        subtotal=checkout.subtotal,
        total_discount=checkout.total_discount,
        total=checkout.total,
    )


@checkout_router.get("/checkouts/{checkout_id}", response_model=CheckoutResponse)
async def get_checkout(checkout_id: str) -> CheckoutResponse:
    return _checkout_response(current_domain.repository_for(Checkout).get(checkout_id))


@checkout_router.get("/customers/{owner_id}/checkouts", response_model=CheckoutListResponse)
async def list_owner_checkouts(owner_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE):
    page, limit = page_window(page, limit)
    checkouts, total = current_domain.repository_for(Checkout).for_owner(owner_id, page=page, limit=limit)
    return CheckoutListResponse(
        items=[_checkout_response(checkout) for checkout in checkouts],
        total=total,
        page=page,
        limit=limit,
    )
