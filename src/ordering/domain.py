"""Ordering bounded context: Shopping Cart, Coupons and Checkout.

Reconciles the guest cart with the customer's remote cart, validates and
redeems promotional coupons, and assembles the final order once a payment
provider reports success.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
ordering = Domain(name="ordering")
