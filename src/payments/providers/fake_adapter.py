"""Configurable fake payment provider for development and testing.

Stands in for any hosted checkout (Razorpay, Stripe, PayPal, Google Pay).
It can be set to succeed, to be dismissed by the customer, or to fail
with a given reason, and keeps a log of every call it receives.
"""

from uuid import uuid4

from payments.providers.port import PaymentIntent, PaymentOutcome, PaymentProvider, PaymentStatus

_BEHAVIOURS = ("succeed", "cancel", "fail", "raise")


class FakeProvider(PaymentProvider):
    def __init__(
        self,
        provider_id: str,
        name: str | None = None,
        description: str = "",
        currencies: tuple[str, ...] = ("INR",),
    ) -> None:
        self.provider_id = provider_id
        self.name = name or provider_id
        self.description = description
        self.currencies = currencies
        self.behaviour: str = "succeed"
        self.failure_reason: str = "Payment failed"
        self.calls: list[dict] = []

    def configure(self, behaviour: str = "succeed", failure_reason: str = "Payment failed") -> None:
        """``raise`` makes confirm() throw, the way a broken SDK would."""
        if behaviour not in _BEHAVIOURS:
            raise ValueError(f"Unknown behaviour: {behaviour}")
        self.behaviour = behaviour
        self.failure_reason = failure_reason

    def initiate(self, amount: float, currency: str, order_id: str) -> PaymentIntent:
        self.calls.append({"method": "initiate", "amount": amount, "currency": currency, "order_id": order_id})
        return PaymentIntent(
            intent_id=f"fake_intent_{uuid4().hex[:12]}",
            provider_id=self.provider_id,
            amount=amount,
            currency=currency,
            order_id=order_id,
        )

    def confirm(self, intent: PaymentIntent) -> PaymentOutcome:
        self.calls.append({"method": "confirm", "intent_id": intent.intent_id})

        if self.behaviour == "raise":
            raise RuntimeError(self.failure_reason)
        if self.behaviour == "cancel":
            return PaymentOutcome(
                status=PaymentStatus.CANCELLED,
                provider_id=self.provider_id,
                amount=intent.amount,
                currency=intent.currency,
                message="Payment cancelled",
            )
        if self.behaviour == "fail":
            return PaymentOutcome(
                status=PaymentStatus.FAILED,
                provider_id=self.provider_id,
                amount=intent.amount,
                currency=intent.currency,
                gateway_status="failed",
                message=self.failure_reason,
            )
        return PaymentOutcome(
            status=PaymentStatus.SUCCEEDED,
            provider_id=self.provider_id,
            amount=intent.amount,
            currency=intent.currency,
            transaction_id=f"{self.provider_id}_txn_{uuid4().hex[:12]}",
            gateway_status="success",
        )

    def cancel(self, intent: PaymentIntent) -> None:
        self.calls.append({"method": "cancel", "intent_id": intent.intent_id})
