"""Storefront bounded context: carts, promotions and checkout.

Prices carts against the active promotion rules and converts a cart into an
immutable Checkout record inside a single unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
