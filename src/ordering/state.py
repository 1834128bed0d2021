"""Explicit application state shared by the storefront components.

``StorefrontState`` holds three slices: the signed-in identity, the cart
currently on display and the orders created this session. It is passed by
reference to the components that need it. Only ``CartService`` writes the
cart slice; only the checkout writes the orders slice.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from ordering.cart.line import CartState

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """An authenticated customer session."""

    user_id: str
    token: str
    expires_at: datetime | None = None

    def is_valid(self, now: datetime | None = None) -> bool:
        if not self.user_id or not self.token:
            return False
        if self.expires_at is None:
            return True
        now = now or datetime.now(UTC)
        return now < self.expires_at


class StorefrontState:
    def __init__(self) -> None:
        self.identity: Identity | None = None
        self.cart: CartState = CartState.empty()
        self.orders: list[dict] = []
        self._cart_listeners: list[Callable[[CartState], None]] = []

    # -------------------------------------------------------------------
    # Auth slice
    # -------------------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None and self.identity.is_valid()

    @property
    def user_id(self) -> str | None:
        return self.identity.user_id if self.is_authenticated else None

    # -------------------------------------------------------------------
    # Cart slice
    # -------------------------------------------------------------------
    def on_cart_changed(self, listener: Callable[[CartState], None]) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._cart_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._cart_listeners:
                self._cart_listeners.remove(listener)

        return unsubscribe

    def replace_cart(self, cart: CartState) -> None:
        self.cart = cart
        self.notify_cart_changed()

    def notify_cart_changed(self) -> None:
        for listener in list(self._cart_listeners):
            listener(self.cart)

    # -------------------------------------------------------------------
    # Orders slice
    # -------------------------------------------------------------------
    def record_order(self, order: dict) -> None:
        self.orders.append(order)
        logger.info("Order recorded in session", order_id=order.get("orderId"))
