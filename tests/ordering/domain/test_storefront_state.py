"""Tests for Identity and StorefrontState."""

from datetime import UTC, datetime, timedelta

from ordering.cart.line import CartState, ProductSnapshot
from ordering.state import Identity, StorefrontState


class TestIdentity:
    def test_identity_without_expiry_is_valid(self):
        assert Identity(user_id="cust-001", token="tok").is_valid()

    def test_missing_token_is_invalid(self):
        assert not Identity(user_id="cust-001", token="").is_valid()

    def test_expiry(self):
        now = datetime(2026, 6, 15, tzinfo=UTC)
        identity = Identity(user_id="cust-001", token="tok", expires_at=now + timedelta(minutes=5))
        assert identity.is_valid(now)
        assert not identity.is_valid(now + timedelta(minutes=5))


class TestStorefrontState:
    def test_starts_anonymous_with_empty_cart(self):
        state = StorefrontState()
        assert not state.is_authenticated
        assert state.user_id is None
        assert state.cart.is_empty
        assert state.orders == []

    def test_user_id_of_signed_in_customer(self):
        state = StorefrontState()
        state.identity = Identity(user_id="cust-001", token="tok")
        assert state.is_authenticated
        assert state.user_id == "cust-001"

    def test_listeners_see_replaced_cart(self):
        state = StorefrontState()
        seen = []
        state.on_cart_changed(seen.append)
        cart = CartState([ProductSnapshot("prod-001", "Wireless Earbuds", 400.0).to_line(1)])

        state.replace_cart(cart)

        assert seen == [cart]
        assert state.cart is cart

    def test_unsubscribe(self):
        state = StorefrontState()
        seen = []
        unsubscribe = state.on_cart_changed(seen.append)
        unsubscribe()
        unsubscribe()
        state.replace_cart(CartState.empty())
        assert seen == []

    def test_record_order(self):
        state = StorefrontState()
        state.record_order({"orderId": "order_1"})
        assert state.orders == [{"orderId": "order_1"}]
