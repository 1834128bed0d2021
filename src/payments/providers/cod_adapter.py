"""Cash on delivery: nothing to collect up front, so it always succeeds."""

from payments.providers.port import PaymentIntent, PaymentOutcome, PaymentProvider, PaymentStatus


class CashOnDeliveryProvider(PaymentProvider):
    provider_id = "cod"
    name = "Cash on Delivery"
    description = "Pay with cash at delivery"
    currencies = ("INR",)

    def initiate(self, amount: float, currency: str, order_id: str) -> PaymentIntent:
        return PaymentIntent(
            intent_id=f"cod_{order_id}",
            provider_id=self.provider_id,
            amount=amount,
            currency=currency,
            order_id=order_id,
        )

    def confirm(self, intent: PaymentIntent) -> PaymentOutcome:
        return PaymentOutcome(
            status=PaymentStatus.SUCCEEDED,
            provider_id=self.provider_id,
            amount=intent.amount,
            currency=intent.currency,
            transaction_id=intent.intent_id,
            gateway_status="cod_selected",
        )

    def cancel(self, intent: PaymentIntent) -> None:  # noqa: ARG002
        return None
