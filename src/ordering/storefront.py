"""Wiring for one storefront session.

Builds the cart service, coupon backend, payment orchestrator and
checkout flow around a single ``StorefrontState``. Collaborators default
to the configured adapters and can be passed in explicitly.
"""

from ordering.cart.cache import CartCache, ProductCache
from ordering.cart.service import CartService
from ordering.cart_backend import get_cart_backend
from ordering.cart_backend.port import CartBackend
from ordering.checkout.assembler import OrderAssembler
from ordering.checkout.flow import CheckoutFlow
from ordering.coupon_backend import get_coupon_backend
from ordering.coupon_backend.port import CouponBackend
from ordering.order_backend import get_order_backend
from ordering.order_backend.port import OrderBackend
from ordering.state import StorefrontState
from ordering.storage import get_store
from ordering.storage.port import KeyValueStore
from payments.orchestrator import PaymentOrchestrator


class Storefront:
    def __init__(
        self,
        state: StorefrontState | None = None,
        store: KeyValueStore | None = None,
        cart_backend: CartBackend | None = None,
        coupon_backend: CouponBackend | None = None,
        order_backend: OrderBackend | None = None,
        orchestrator: PaymentOrchestrator | None = None,
        currency: str = "INR",
    ) -> None:
        self.state = state or StorefrontState()
        store = store or get_store()

        self.cart = CartService(
            self.state,
            cart_backend or get_cart_backend(),
            CartCache(store),
            ProductCache(store),
        )
        self.coupons = coupon_backend or get_coupon_backend()
        self.orders = order_backend or get_order_backend()
        self.payments = orchestrator or PaymentOrchestrator()
        self.checkout = CheckoutFlow(
            self.state,
            self.cart,
            self.coupons,
            self.payments,
            OrderAssembler(self.state, self.cart, self.coupons, self.orders),
            currency=currency,
        )
