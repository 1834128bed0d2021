"""Shared BDD fixtures and step definitions for the Ordering domain."""

from datetime import timedelta

import pytest
from ordering.cart.cache import GUEST_SCOPE
from ordering.coupon.redemption import RedeemCoupon
from ordering.state import Identity
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    """Container for the result of the step under test."""
    return {}


# ---------------------------------------------------------------------------
# Given steps: coupons
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a fixed coupon "{code}" worth {value:g}'))
def fixed_coupon(make_coupon, code, value):
    make_coupon(code, "fixed", value)


@given(parsers.cfparse('a fixed coupon "{code}" worth {value:g} restricted to "{method}" payments'))
def method_restricted_coupon(make_coupon, code, value, method):
    make_coupon(code, "fixed", value, payment_methods=[method])


@given(
    parsers.cfparse(
        'a percentage coupon "{code}" worth {value:g} capped at {cap:g} with minimum order {minimum:g}'
    )
)
def capped_percentage_coupon(make_coupon, code, value, cap, minimum):
    make_coupon(code, "percentage", value, max_discount=cap, min_order_value=minimum)


@given(parsers.cfparse('an expired fixed coupon "{code}" worth {value:g}'))
def expired_coupon(make_coupon, now, code, value):
    make_coupon(code, "fixed", value, valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))


@given(parsers.cfparse('customer "{user_id}" has redeemed "{code}" on an order of {value:g}'))
def redeemed_coupon(user_id, code, value):
    current_domain.process(
        RedeemCoupon(code=code, user_id=user_id, order_value=value, discount_applied=0),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps: shoppers and carts
# ---------------------------------------------------------------------------
@given("a guest shopper")
def guest_shopper(storefront):
    storefront.cart.start_session()


@given(parsers.cfparse('a shopper signed in as "{user_id}"'))
def signed_in_shopper(storefront, user_id):
    storefront.cart.start_session(Identity(user_id=user_id, token=f"token-{user_id}"))


@given(parsers.cfparse('the shopper adds {quantity:d} of "{product_id}"'))
@when(parsers.cfparse('the shopper adds {quantity:d} of "{product_id}"'))
def shopper_adds(storefront, catalogue, error, quantity, product_id):
    try:
        storefront.cart.add(product_id, quantity, product=catalogue.get(product_id))
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_line_count(storefront, count):
    assert len(storefront.state.cart.lines) == count


@then(parsers.cfparse('the cart holds {quantity:d} of "{product_id}"'))
def cart_holds(storefront, quantity, product_id):
    line = storefront.state.cart.line_for(product_id)
    assert line is not None, f"{product_id} is not in the cart"
    assert line.quantity == quantity


@then(parsers.cfparse("the cart total is {total:g}"))
def cart_total_is(storefront, total):
    assert storefront.state.cart.total_amount == total


@then("the cart is empty")
def cart_is_empty(storefront):
    assert storefront.state.cart.is_empty


@then("the guest cart is empty")
def guest_cart_is_empty(storefront):
    assert storefront.cart.cache.load(GUEST_SCOPE).is_empty


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the cart action fails with "{message}"'))
def cart_action_fails_with(error, message):
    cart_action_fails(error)
    assert message in error["exc"].messages["cart"]
