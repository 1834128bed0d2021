"""Payment orchestrator: drives exactly one provider flow at a time.

The orchestrator lists the providers that can take a payment, keeps at
most one intent in flight, and reduces whatever a provider does to a
single ``PaymentOutcome``: succeeded, cancelled or failed. It never
retries; a retry is the customer choosing a provider again.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from payments.methods import normalize_payment_method
from payments.providers import all_providers, get_provider
from payments.providers.port import PaymentIntent, PaymentOutcome, PaymentProvider, PaymentStatus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderOption:
    provider_id: str
    name: str
    description: str
    method_tag: str


@dataclass(frozen=True)
class PaymentSelection:
    provider_id: str
    method_tag: str

    @classmethod
    def for_provider(cls, provider_id: str) -> "PaymentSelection":
        return cls(provider_id=provider_id, method_tag=normalize_payment_method(provider_id))


class PaymentOrchestrator:
    def __init__(
        self,
        providers: Callable[[], list[PaymentProvider]] = all_providers,
        lookup: Callable[[str], PaymentProvider] = get_provider,
    ) -> None:
        self._providers = providers
        self._lookup = lookup
        self._active: tuple[PaymentProvider, PaymentIntent] | None = None

    def lookup(self, provider_id: str) -> PaymentProvider:
        """Resolve a provider id, raising ``UnknownProvider`` when it is not registered."""
        return self._lookup(provider_id)

    @property
    def active_intent(self) -> PaymentIntent | None:
        return self._active[1] if self._active else None

    def available_providers(self, amount: float, currency: str, order_id: str | None = None) -> list[ProviderOption]:
        """Providers able to take ``amount`` in ``currency``, in registry order."""
        options = [
            ProviderOption(
                provider_id=provider.provider_id,
                name=provider.name,
                description=provider.description,
                method_tag=normalize_payment_method(provider.provider_id),
            )
            for provider in self._providers()
            if provider.supports(amount, currency)
        ]
        logger.debug("Payment providers listed", order_id=order_id, amount=amount, count=len(options))
        return options

    def select(self, provider_id: str, amount: float, currency: str, order_id: str) -> PaymentIntent:
        """Start a flow with ``provider_id``, abandoning any flow already in flight."""
        provider = self._lookup(provider_id)
        self.abandon()
        intent = provider.initiate(amount, currency, order_id)
        self._active = (provider, intent)
        logger.info(
            "Payment flow started",
            provider=provider_id,
            order_id=order_id,
            amount=amount,
            currency=currency,
        )
        return intent

    def abandon(self) -> None:
        """Cancel the in-flight intent, if any, without producing an outcome."""
        if self._active is None:
            return
        provider, intent = self._active
        self._active = None
        provider.cancel(intent)
        logger.info("Payment flow abandoned", provider=provider.provider_id, order_id=intent.order_id)

    def confirm(self) -> PaymentOutcome:
        """Run the active provider flow to its outcome."""
        if self._active is None:
            raise RuntimeError("No payment flow is in progress")
        provider, intent = self._active
        try:
            outcome = provider.confirm(intent)
        except Exception as exc:
            logger.error(
                "Payment provider raised",
                provider=provider.provider_id,
                order_id=intent.order_id,
                exc_info=True,
            )
            outcome = PaymentOutcome(
                status=PaymentStatus.FAILED,
                provider_id=provider.provider_id,
                amount=intent.amount,
                currency=intent.currency,
                gateway_status="error",
                message=str(exc) or "Payment failed",
            )
        finally:
            self._active = None

        log = logger.info if outcome.succeeded else logger.warning
        log(
            "Payment flow finished",
            provider=provider.provider_id,
            order_id=intent.order_id,
            status=outcome.status.value,
            transaction_id=outcome.transaction_id,
            message=outcome.message,
        )
        return outcome

    def pay(self, provider_id: str, amount: float, currency: str, order_id: str) -> PaymentOutcome:
        """Select a provider and confirm in one step."""
        try:
            self.select(provider_id, amount, currency, order_id)
        except Exception as exc:
            logger.error("Payment provider could not start", provider=provider_id, order_id=order_id, exc_info=True)
            return PaymentOutcome(
                status=PaymentStatus.FAILED,
                provider_id=provider_id,
                amount=amount,
                currency=currency,
                gateway_status="error",
                message=str(exc) or "Payment failed",
            )
        return self.confirm()
