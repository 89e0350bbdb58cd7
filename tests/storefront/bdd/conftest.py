"""Shared BDD fixtures and step definitions for the Storefront."""

import json
from datetime import UTC, datetime

import pytest
from protean import current_domain
from pytest_bdd import given, parsers
from storefront.cart.items import AddToCart
from storefront.promotion.management import CreatePromotion
from storefront.promotion.promotion import Promotion


@pytest.fixture()
def outcome():
    """Container for checkouts and captured checkout errors."""
    return {"checkouts": [], "errors": []}


def _create_promotion(kind, rule, description=""):
    current_domain.process(
        CreatePromotion(kind=kind, description=description, rule=json.dumps(rule)),
        asynchronous=False,
    )


def _store_unchecked_promotion(kind, rule):
    # Bypasses authoring validation, as a promotion written by another tool might
    promotion = Promotion(kind=kind, description="", rule=json.dumps(rule), created_at=datetime.now(UTC))
    current_domain.repository_for(Promotion).add(promotion)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the customer "{owner_id}" is shopping'), target_fixture="owner_id")
def shopping_customer(owner_id):
    return owner_id


@given(parsers.cfparse('the cart holds {quantity:d} "{sku}" at {price:f}'))
def cart_holds(owner_id, quantity, sku, price):
    current_domain.process(
        AddToCart(
            owner_id=owner_id,
            product_id=f"prod-{sku}",
            sku=sku,
            name=f"Product {sku}",
            unit_price=price,
            quantity=quantity,
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('a promotion giving {free:d} "{free_sku}" free for every {trigger:d} "{trigger_sku}"'))
def buy_x_get_y_free(free, free_sku, trigger, trigger_sku):
    _create_promotion(
        "BUY_ONE_GET_ONE_FREE",
        {"trigger_sku": trigger_sku, "free_sku": free_sku, "trigger_quantity": trigger, "free_quantity": free},
    )


@given(parsers.cfparse('a promotion on "{sku}" paying for {paid:d} and getting {free:d} free from {minimum:d} units'))
def buy_n_pay_m(sku, paid, free, minimum):
    _create_promotion(
        "BUY_3_PAY_2",
        {"sku": sku, "min_quantity": minimum, "paid_quantity_divisor": paid, "free_quantity_divisor": free},
    )


@given(parsers.cfparse('a promotion of {percent:d} percent off "{sku}" from {minimum:d} units'))
def bulk_discount(percent, sku, minimum):
    _create_promotion("BULK_DISCOUNT", {"sku": sku, "min_quantity": minimum, "discount_percentage": percent})


@given(parsers.cfparse('a stored promotion of {percent:d} percent off "{sku}"'))
def stored_bulk_discount(percent, sku):
    _store_unchecked_promotion("BULK_DISCOUNT", {"sku": sku, "min_quantity": 1, "discount_percentage": percent})


@given("a stored promotion without a sku")
def stored_promotion_without_sku():
    _store_unchecked_promotion("BULK_DISCOUNT", {"min_quantity": 1, "discount_percentage": 10})
