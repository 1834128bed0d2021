"""BDD tests for paying for a cart and turning it into an order."""

from ordering.exceptions import OrderCreationFailed
from payments.providers import get_provider
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/checkout.feature")

ADDRESS = {
    "name": "Asha Rao",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "zip_code": "560001",
    "country": "India",
}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("checkout has started")
def checkout_started(storefront):
    storefront.checkout.begin(ADDRESS)


@given("the order service is down")
def order_service_down(order_backend):
    order_backend.configure(should_succeed=False)


@given(parsers.cfparse('the "{provider_id}" checkout will be dismissed'))
def provider_dismissed(provider_id):
    get_provider(provider_id).configure(behaviour="cancel")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the shopper applies coupon "{code}"'))
def shopper_applies_coupon(storefront, error, code):
    try:
        storefront.checkout.apply_coupon(code)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the shopper pays with "{provider_id}"'))
def shopper_pays(storefront, outcome, provider_id):
    storefront.checkout.select_payment(provider_id)
    try:
        outcome["payment"] = storefront.checkout.pay()
    except OrderCreationFailed as exc:
        outcome["failure"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{provider_id}" was charged {amount:g}'))
def provider_charged(provider_id, amount):
    initiated = [c for c in get_provider(provider_id).calls if c["method"] == "initiate"]
    assert [c["amount"] for c in initiated] == [amount]


@then(parsers.cfparse("an order is created for {total:g} with original price {original:g}"))
def order_created(order_backend, total, original):
    assert len(order_backend.orders) == 1
    order = order_backend.orders[0]
    assert order["totalPrice"] == total
    assert order["originalPrice"] == original


@then("the shopper is told to contact support before paying again")
def told_to_contact_support(outcome):
    failure = outcome.get("failure")
    assert failure is not None, "Expected order creation to fail"
    assert "contact support before paying again" in failure.message


@then("the checkout cannot take another payment")
def checkout_is_closed(storefront):
    session = storefront.checkout.session
    assert session.is_terminal
    assert not session.can_retry_payment


@then("the checkout is back at payment selection")
def back_at_selection(storefront, outcome):
    from ordering.checkout.session import CheckoutStatus

    assert outcome["payment"].cancelled
    assert storefront.checkout.session.status == CheckoutStatus.SELECTING_PAYMENT


@then("no order is created")
def no_order(order_backend):
    assert order_backend.orders == []
