"""Order assembler: turns a paid checkout into an order.

Runs only after a payment succeeded, so every failure here means money
was captured without an order. Such failures are raised as
``OrderCreationFailed`` and logged at error level; they are never retried
by paying again.
"""

import structlog
from protean.exceptions import ValidationError

from ordering.cart.line import CartState
from ordering.cart.service import CartService
from ordering.checkout.session import CheckoutSession
from ordering.coupon_backend.port import CouponBackend
from ordering.exceptions import OrderCreationFailed
from ordering.order_backend.port import OrderBackend
from ordering.state import StorefrontState
from payments.providers.port import PaymentOutcome

logger = structlog.get_logger(__name__)


def build_order_payload(cart: CartState, session: CheckoutSession, outcome: PaymentOutcome) -> dict:
    """The ``POST /orders`` body: both prices are sent so the discount can be audited."""
    discount, final_amount = session.amounts_for(cart.total_amount)
    application = session.coupon_application
    return {
        "orderItems": [
            {"product": line.product_id, "quantity": line.quantity, "price": line.unit_price}
            for line in cart.lines
        ],
        "shippingAddress": session.shipping_address.to_payload(),
        "paymentMethod": session.selected_provider or "card",
        "paymentResult": outcome.to_payment_result(),
        "totalPrice": final_amount,
        "originalPrice": cart.total_amount,
        "discountAmount": discount,
        "couponCode": application.coupon.code if application else None,
        "orderId": session.order_id,
    }


class OrderAssembler:
    def __init__(
        self,
        state: StorefrontState,
        cart_service: CartService,
        coupon_backend: CouponBackend,
        order_backend: OrderBackend,
    ) -> None:
        self.state = state
        self.cart_service = cart_service
        self.coupon_backend = coupon_backend
        self.order_backend = order_backend

    def assemble(self, session: CheckoutSession, outcome: PaymentOutcome) -> dict:
        cart = self.state.cart
        if cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})

        identity = self.state.identity
        application = session.coupon_application
        if application is not None:
            redeemed = self.coupon_backend.apply(
                identity,
                application.coupon.code,
                order_value=cart.total_amount,
                discount_applied=application.discount_amount,
            )
            if not redeemed.ok:
                self._fail(session, outcome, f"Coupon could not be applied: {redeemed.error.message}")

        payload = build_order_payload(cart, session, outcome)
        created = self.order_backend.create_order(identity, payload)
        if not created.ok:
            self._fail(session, outcome, created.error.message)

        order = created.value
        self.state.record_order(order)
        logger.info(
            "Order created",
            order_id=session.order_id,
            total_price=payload["totalPrice"],
            original_price=payload["originalPrice"],
            coupon_code=payload["couponCode"],
        )

        try:
            self.cart_service.clear()
        except ValidationError as exc:
            logger.error("Cart could not be cleared after order", order_id=session.order_id, errors=exc.messages)
        return order

    def _fail(self, session: CheckoutSession, outcome: PaymentOutcome, reason: str) -> None:
        logger.error(
            "Order creation failed after payment",
            order_id=session.order_id,
            transaction_id=outcome.transaction_id,
            provider=outcome.provider_id,
            reason=reason,
        )
        raise OrderCreationFailed(session.order_id, outcome.transaction_id, reason)
