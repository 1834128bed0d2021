"""Payment provider registry.

Provides get_provider() / register_provider() to swap implementations.
Development defaults are fake hosted checkouts for every supported
provider plus real cash on delivery.
"""

from payments.providers.cod_adapter import CashOnDeliveryProvider
from payments.providers.fake_adapter import FakeProvider
from payments.providers.port import PaymentProvider, UnknownProvider

_PROVIDER_INFO = {
    "razorpay": ("Razorpay", "UPI, Card, Netbanking", ("INR",)),
    "paypal": ("PayPal", "Pay via PayPal wallet", ("USD", "INR")),
    "stripe": ("Card (Stripe)", "Credit/Debit cards", ("INR", "USD", "EUR")),
    "upi": ("UPI", "Pay via UPI apps", ("INR",)),
    "googlepay": ("Google Pay", "GPay UPI", ("INR",)),
    "phonepe": ("PhonePe", "Pay using PhonePe UPI", ("INR",)),
    "paytm": ("Paytm", "Pay using Paytm Wallet/UPI", ("INR",)),
}

_providers: dict[str, PaymentProvider] | None = None


def _default_providers() -> dict[str, PaymentProvider]:
    providers: dict[str, PaymentProvider] = {"cod": CashOnDeliveryProvider()}
    for provider_id, (name, description, currencies) in _PROVIDER_INFO.items():
        providers[provider_id] = FakeProvider(provider_id, name, description, currencies)
    return providers


def all_providers() -> list[PaymentProvider]:
    global _providers
    if _providers is None:
        _providers = _default_providers()
    return list(_providers.values())


def get_provider(provider_id: str) -> PaymentProvider:
    all_providers()
    try:
        return _providers[provider_id]
    except KeyError:
        raise UnknownProvider(provider_id) from None


def register_provider(provider: PaymentProvider) -> None:
    """Add or replace a provider (useful for tests and real adapters)."""
    all_providers()
    _providers[provider.provider_id] = provider


def reset_providers() -> None:
    global _providers
    _providers = None
