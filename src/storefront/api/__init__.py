"""Storefront API package."""

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import cart_router, checkout_router, promotion_router

__all__ = ["cart_router", "promotion_router", "checkout_router", "register_exception_handlers"]
