from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()


# ---------------------------------------------------------------------------
# Storefront collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def now():
    return datetime.now(UTC)


@pytest.fixture()
def catalogue():
    from ordering.cart.line import ProductSnapshot

    return {
        "prod-001": ProductSnapshot(product_id="prod-001", name="Wireless Earbuds", price=400.0, image_ref="/img/earbuds.jpg"),
        "prod-002": ProductSnapshot(product_id="prod-002", name="Phone Case", price=200.0, image_ref="/img/case.jpg"),
        "prod-003": ProductSnapshot(product_id="prod-003", name="USB-C Cable", price=99.5),
    }


@pytest.fixture()
def customer():
    from ordering.state import Identity

    return Identity(user_id="cust-001", token="token-cust-001")


@pytest.fixture()
def store():
    from ordering.storage.memory_adapter import MemoryStore

    return MemoryStore()


@pytest.fixture()
def cart_backend(catalogue):
    from ordering.cart_backend.fake_adapter import FakeCartBackend

    return FakeCartBackend(list(catalogue.values()))


@pytest.fixture()
def order_backend():
    from ordering.order_backend.fake_adapter import FakeOrderBackend

    return FakeOrderBackend()


@pytest.fixture()
def storefront(store, cart_backend, order_backend):
    from ordering.coupon_backend.domain_adapter import DomainCouponBackend
    from ordering.storefront import Storefront
    from payments.orchestrator import PaymentOrchestrator

    return Storefront(
        store=store,
        cart_backend=cart_backend,
        coupon_backend=DomainCouponBackend(),
        order_backend=order_backend,
        orchestrator=PaymentOrchestrator(),
    )


@pytest.fixture()
def cart_service(storefront):
    return storefront.cart


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_coupon(now):
    """Persist a coupon; defaults describe a live, unrestricted 10% coupon."""
    from ordering.coupon.coupon import Coupon
    from protean import current_domain

    def _make(code="SAVE10", discount_type="percentage", discount_value=10, **overrides):
        fields = {
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
            "title": f"{code} offer",
        }
        fields.update(overrides)
        coupon = Coupon.create(code=code, discount_type=discount_type, discount_value=discount_value, **fields)
        current_domain.repository_for(Coupon).add(coupon)
        return current_domain.repository_for(Coupon).get(coupon.code)

    return _make
