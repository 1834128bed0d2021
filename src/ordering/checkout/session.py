"""Checkout session: one attempt to pay for the current cart.

State Machine:
    SELECTING_PAYMENT → PROCESSING_PAYMENT →
        PAYMENT_SUCCEEDED → CREATING_ORDER → ORDER_CREATED | ORDER_CREATION_FAILED
        PAYMENT_FAILED → SELECTING_PAYMENT
        PAYMENT_CANCELLED → SELECTING_PAYMENT

ORDER_CREATED and ORDER_CREATION_FAILED are terminal. The session also
carries the coupon application for this attempt, which is only good for
the order value and payment method it was computed against.
"""

import random
import string
import time
from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import String

from ordering.coupon.coupon import CouponSnapshot
from ordering.domain import ordering
from payments.orchestrator import PaymentSelection


class CheckoutStatus(Enum):
    SELECTING_PAYMENT = "selecting_payment"
    PROCESSING_PAYMENT = "processing_payment"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_CANCELLED = "payment_cancelled"
    CREATING_ORDER = "creating_order"
    ORDER_CREATED = "order_created"
    ORDER_CREATION_FAILED = "order_creation_failed"


_VALID_TRANSITIONS = {
    CheckoutStatus.SELECTING_PAYMENT: {CheckoutStatus.PROCESSING_PAYMENT},
    CheckoutStatus.PROCESSING_PAYMENT: {
        CheckoutStatus.PAYMENT_SUCCEEDED,
        CheckoutStatus.PAYMENT_FAILED,
        CheckoutStatus.PAYMENT_CANCELLED,
    },
    CheckoutStatus.PAYMENT_FAILED: {CheckoutStatus.SELECTING_PAYMENT},
    CheckoutStatus.PAYMENT_CANCELLED: {CheckoutStatus.SELECTING_PAYMENT},
    CheckoutStatus.PAYMENT_SUCCEEDED: {CheckoutStatus.CREATING_ORDER},
    CheckoutStatus.CREATING_ORDER: {CheckoutStatus.ORDER_CREATED, CheckoutStatus.ORDER_CREATION_FAILED},
    CheckoutStatus.ORDER_CREATED: set(),  # Terminal
    CheckoutStatus.ORDER_CREATION_FAILED: set(),  # Terminal
}


def generate_order_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"order_{int(time.time() * 1000)}_{suffix}"


@ordering.value_object
class ShippingAddress:
    """Where the order is delivered, captured when checkout starts."""

    name = String(max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country,
        }


@dataclass(frozen=True)
class CouponApplication:
    """A validated coupon, bound to the order value and payment method it was checked for."""

    coupon: CouponSnapshot
    order_value: float
    payment_method: str | None
    discount_amount: float
    final_amount: float

    def still_applies_to(self, order_value: float, payment_method: str | None) -> bool:
        return self.order_value == order_value and self.payment_method == payment_method


class CheckoutSession:
    def __init__(self, order_id: str, shipping_address: ShippingAddress, currency: str = "INR") -> None:
        self.order_id = order_id
        self.shipping_address = shipping_address
        self.currency = currency
        self.status = CheckoutStatus.SELECTING_PAYMENT
        self.history: list[CheckoutStatus] = [self.status]
        self.selection: PaymentSelection | None = None
        self.coupon_application: CouponApplication | None = None
        self.coupon_message: str | None = None
        self.last_error: str | None = None
        self.order: dict | None = None

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def transition_to(self, target: CheckoutStatus) -> None:
        if target not in _VALID_TRANSITIONS.get(self.status, set()):
            raise ValidationError(
                {"status": [f"Cannot transition from {self.status.value} to {target.value}"]}
            )
        self.status = target
        self.history.append(target)

    @property
    def selected_provider(self) -> str | None:
        return self.selection.provider_id if self.selection else None

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.status]

    @property
    def can_retry_payment(self) -> bool:
        """Whether the customer may be offered another payment attempt."""
        return self.status in (
            CheckoutStatus.SELECTING_PAYMENT,
            CheckoutStatus.PAYMENT_FAILED,
            CheckoutStatus.PAYMENT_CANCELLED,
        )

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def amounts_for(self, order_value: float) -> tuple[float, float]:
        """(discount, amount to charge) for the current coupon application."""
        if self.coupon_application is None:
            return 0.0, order_value
        return self.coupon_application.discount_amount, self.coupon_application.final_amount
