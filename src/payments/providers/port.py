"""Payment provider port (abstract interface).

Every provider, whether card network, UPI app, wallet or cash on
delivery, exposes the same three steps: ``initiate`` creates an intent
for an order, ``confirm`` drives the provider's flow to a single outcome,
and ``cancel`` abandons an intent that will not be confirmed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from payments.methods import normalize_payment_method


class PaymentStatus(Enum):
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"


class UnknownProvider(ValueError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(f"Unknown payment provider: {provider_id}")
        self.provider_id = provider_id


@dataclass(frozen=True)
class PaymentIntent:
    intent_id: str
    provider_id: str
    amount: float
    currency: str
    order_id: str


@dataclass(frozen=True)
class PaymentOutcome:
    """The normalized result of one provider flow."""

    status: PaymentStatus
    provider_id: str
    amount: float
    currency: str
    transaction_id: str | None = None
    gateway_status: str | None = None
    message: str | None = None

    @property
    def payment_method(self) -> str | None:
        return normalize_payment_method(self.provider_id)

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.status == PaymentStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status == PaymentStatus.FAILED

    def to_payment_result(self) -> dict:
        """The ``paymentResult`` block sent with an order."""
        return {
            "success": self.succeeded,
            "status": self.gateway_status or self.status.value,
            "transactionId": self.transaction_id,
            "amount": self.amount,
            "currency": self.currency,
            "paymentMethod": self.provider_id,
        }


class PaymentProvider(ABC):
    provider_id: str = ""
    name: str = ""
    description: str = ""
    currencies: tuple[str, ...] = ("INR",)

    def supports(self, amount: float, currency: str) -> bool:
        return amount > 0 and currency.upper() in self.currencies

    @abstractmethod
    def initiate(self, amount: float, currency: str, order_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    def confirm(self, intent: PaymentIntent) -> PaymentOutcome:
        """Run the provider flow to completion. May return any status."""
        ...

    @abstractmethod
    def cancel(self, intent: PaymentIntent) -> None:
        ...
