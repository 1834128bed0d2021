import pytest
from payments.orchestrator import PaymentOrchestrator
from payments.providers import register_provider, reset_providers
from payments.providers.fake_adapter import FakeProvider


@pytest.fixture(autouse=True)
def _fresh_registry():
    reset_providers()
    yield
    reset_providers()


@pytest.fixture()
def stripe():
    provider = FakeProvider("stripe", "Card (Stripe)", "Credit/Debit cards", ("INR", "USD", "EUR"))
    register_provider(provider)
    return provider


@pytest.fixture()
def googlepay():
    provider = FakeProvider("googlepay", "Google Pay", "GPay UPI", ("INR",))
    register_provider(provider)
    return provider


@pytest.fixture()
def orchestrator():
    return PaymentOrchestrator()
