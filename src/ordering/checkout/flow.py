"""Checkout flow: drives one checkout session from cart to order.

The flow reads the cart through ``CartService``, prices coupons through
the coupon backend, collects payment through the ``PaymentOrchestrator``
and hands a successful payment to the ``OrderAssembler``.
"""

import structlog
from protean.exceptions import ValidationError

from ordering.cart.service import CartService
from ordering.checkout.assembler import OrderAssembler
from ordering.checkout.session import (
    CheckoutSession,
    CheckoutStatus,
    CouponApplication,
    ShippingAddress,
    generate_order_id,
)
from ordering.coupon_backend.port import CouponBackend
from ordering.exceptions import OrderCreationFailed
from ordering.state import StorefrontState
from ordering.utils.logging import add_context
from payments.orchestrator import PaymentOrchestrator, PaymentSelection, ProviderOption
from payments.providers.port import PaymentOutcome, UnknownProvider

logger = structlog.get_logger(__name__)

COUPON_UNAVAILABLE_MESSAGE = "Could not check the coupon right now, please try again"


class CheckoutFlow:
    def __init__(
        self,
        state: StorefrontState,
        cart_service: CartService,
        coupon_backend: CouponBackend,
        orchestrator: PaymentOrchestrator,
        assembler: OrderAssembler,
        currency: str = "INR",
    ) -> None:
        self.state = state
        self.cart_service = cart_service
        self.coupon_backend = coupon_backend
        self.orchestrator = orchestrator
        self.assembler = assembler
        self.currency = currency
        self.session: CheckoutSession | None = None

    # -------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------
    def begin(self, shipping_address: ShippingAddress | dict) -> CheckoutSession:
        cart = self.cart_service.get()
        if cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})
        if isinstance(shipping_address, dict):
            shipping_address = ShippingAddress(**shipping_address)

        self.orchestrator.abandon()
        self.session = CheckoutSession(generate_order_id(), shipping_address, currency=self.currency)
        add_context(order_id=self.session.order_id)
        logger.info("Checkout started", order_id=self.session.order_id, cart_total=cart.total_amount)
        return self.session

    def _require_session(self) -> CheckoutSession:
        if self.session is None:
            raise ValidationError({"checkout": ["Checkout has not been started"]})
        return self.session

    @property
    def payment_tag(self) -> str | None:
        session = self._require_session()
        return session.selection.method_tag if session.selection else None

    def amount_due(self) -> float:
        session = self._require_session()
        self.refresh_coupon()
        return session.amounts_for(self.state.cart.total_amount)[1]

    # -------------------------------------------------------------------
    # Payment selection
    # -------------------------------------------------------------------
    def available_providers(self) -> list[ProviderOption]:
        session = self._require_session()
        return self.orchestrator.available_providers(self.amount_due(), self.currency, session.order_id)

    def select_payment(self, provider_id: str) -> None:
        session = self._require_session()
        if session.status != CheckoutStatus.SELECTING_PAYMENT:
            raise ValidationError({"status": [f"Cannot change payment method while {session.status.value}"]})
        try:
            self.orchestrator.lookup(provider_id)
        except UnknownProvider as exc:
            raise ValidationError({"payment_method": [str(exc)]}) from exc

        session.selection = PaymentSelection.for_provider(provider_id)
        session.last_error = None
        self.refresh_coupon()

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    def apply_coupon(self, code: str) -> CouponApplication:
        """Validate ``code`` against the current cart and bind it to this session.

        Raises ``SignInRequired`` without an identity, and ``ValidationError``
        with a customer-facing message when the coupon does not apply.
        """
        session = self._require_session()
        application, message = self._validate(code)
        if application is None:
            session.coupon_application = None
            session.coupon_message = message
            raise ValidationError({"coupon": [message]})

        session.coupon_application = application
        session.coupon_message = None
        logger.info(
            "Coupon applied to checkout",
            order_id=session.order_id,
            code=application.coupon.code,
            discount=application.discount_amount,
        )
        return application

    def remove_coupon(self) -> None:
        session = self._require_session()
        session.coupon_application = None
        session.coupon_message = None

    def refresh_coupon(self) -> CouponApplication | None:
        """Re-run validation when the cart total or payment method moved on.

        A coupon that no longer applies is dropped and the reason is kept
        in ``session.coupon_message``.
        """
        session = self._require_session()
        application = session.coupon_application
        if application is None:
            return None
        if application.still_applies_to(self.state.cart.total_amount, self.payment_tag):
            return application

        refreshed, message = self._validate(application.coupon.code)
        session.coupon_application = refreshed
        session.coupon_message = message
        if refreshed is None:
            logger.info("Coupon dropped from checkout", order_id=session.order_id, reason=message)
        return refreshed

    def _validate(self, code: str) -> tuple[CouponApplication | None, str | None]:
        cart = self.state.cart
        payment_tag = self.payment_tag
        result = self.coupon_backend.validate(
            self.state.identity,
            code,
            cart.total_amount,
            payment_method=payment_tag,
            product_ids=cart.product_ids,
        )
        if not result.ok:
            logger.warning("Coupon validation call failed", code=code, error=result.error.message)
            return None, COUPON_UNAVAILABLE_MESSAGE if result.recoverable else result.error.message

        validation = result.value
        if not validation.valid:
            return None, validation.message

        return (
            CouponApplication(
                coupon=validation.coupon,
                order_value=cart.total_amount,
                payment_method=payment_tag,
                discount_amount=validation.discount_amount,
                final_amount=validation.final_amount,
            ),
            None,
        )

    # -------------------------------------------------------------------
    # Payment and order
    # -------------------------------------------------------------------
    def pay(self) -> PaymentOutcome:
        """Run the selected provider's flow and, on success, create the order.

        A failed or cancelled payment returns the session to payment
        selection. A payment that succeeds but cannot be turned into an
        order ends the session in ORDER_CREATION_FAILED and raises
        ``OrderCreationFailed``.
        """
        session = self._require_session()
        if session.is_terminal:
            raise ValidationError({"status": ["This checkout is finished and cannot take another payment"]})
        if session.status != CheckoutStatus.SELECTING_PAYMENT:
            raise ValidationError({"status": [f"Cannot pay while {session.status.value}"]})
        if session.selected_provider is None:
            raise ValidationError({"payment_method": ["Please select a payment method"]})

        cart = self.cart_service.get()
        if cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})
        amount = self.amount_due()

        session.transition_to(CheckoutStatus.PROCESSING_PAYMENT)
        outcome = self.orchestrator.pay(session.selected_provider, amount, self.currency, session.order_id)

        if outcome.succeeded:
            session.transition_to(CheckoutStatus.PAYMENT_SUCCEEDED)
            self._create_order(session, outcome)
        elif outcome.cancelled:
            session.transition_to(CheckoutStatus.PAYMENT_CANCELLED)
            session.transition_to(CheckoutStatus.SELECTING_PAYMENT)
            session.selection = None
        else:
            session.transition_to(CheckoutStatus.PAYMENT_FAILED)
            session.last_error = outcome.message
            session.transition_to(CheckoutStatus.SELECTING_PAYMENT)
        return outcome

    def _create_order(self, session: CheckoutSession, outcome: PaymentOutcome) -> None:
        session.transition_to(CheckoutStatus.CREATING_ORDER)
        try:
            session.order = self.assembler.assemble(session, outcome)
        except OrderCreationFailed as exc:
            session.transition_to(CheckoutStatus.ORDER_CREATION_FAILED)
            session.last_error = exc.message
            raise
        except ValidationError as exc:
            raise self._order_creation_failed(session, outcome, str(exc.messages)) from exc
        except Exception as exc:
            # Money has been taken: nothing may escape as anything else
            logger.exception("Unexpected error creating order", order_id=session.order_id)
            raise self._order_creation_failed(session, outcome, str(exc)) from exc
        session.transition_to(CheckoutStatus.ORDER_CREATED)

    def _order_creation_failed(
        self, session: CheckoutSession, outcome: PaymentOutcome, reason: str
    ) -> OrderCreationFailed:
        session.transition_to(CheckoutStatus.ORDER_CREATION_FAILED)
        failure = OrderCreationFailed(session.order_id, outcome.transaction_id, reason)
        session.last_error = failure.message
        return failure
