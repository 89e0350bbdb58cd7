"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    sku: str = Field(min_length=1, max_length=50)
    name: str = ""
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "sku": "SKU-A",
                    "name": "Espresso beans 1kg",
                    "unit_price": 10.0,
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Promotion Request Schemas
# ---------------------------------------------------------------------------
class CreatePromotionRequest(BaseModel):
    kind: str
    description: str = ""
    rule: dict
    active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "kind": "BUY_3_PAY_2",
                    "description": "Three for two on beans",
                    "rule": {"sku": "SKU-A", "min_quantity": 3, "paid_quantity_divisor": 2, "free_quantity_divisor": 1},
                    "active": True,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    owner_id: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartIdResponse(BaseModel):
    cart_id: str


class PromotionIdResponse(BaseModel):
    promotion_id: str


class CheckoutIdResponse(BaseModel):
    checkout_id: str
    subtotal: float
    total_discount: float
    total: float


class StatusResponse(BaseModel):
    status: str = "ok"


class AppliedPromotionResponse(BaseModel):
    promotion_id: str
    kind: str
    description: str = ""
    discount_amount: float


class CartLineResponse(BaseModel):
    product_id: str
    sku: str
    name: str = ""
    quantity: int
    unit_price: float
    line_subtotal: float
    line_discount: float
    line_total: float


class CartResponse(BaseModel):
    owner_id: str
    cart_id: str | None = None
    items: list[CartLineResponse]
    applied_promotions: list[AppliedPromotionResponse]
    subtotal: float
    total_discount: float
    total: float
    currency: str


class PromotionResponse(BaseModel):
    promotion_id: str
    kind: str
    description: str = ""
    rule: dict
    active: bool
    created_at: datetime | None = None


class PromotionListResponse(BaseModel):
    items: list[PromotionResponse]
    total: int
    page: int
    limit: int


class CheckoutResponse(BaseModel):
    checkout_id: str
    owner_id: str
    cart_id: str
    status: str
    payment_status: str
    currency: str
    allocation: str
    subtotal: float
    total_discount: float
    total: float
    lines: list[CartLineResponse]
    applied_promotions: list[AppliedPromotionResponse]
    created_at: datetime | None = None


class CheckoutListResponse(BaseModel):
    items: list[CheckoutResponse]
    total: int
    page: int
    limit: int
