"""BDD tests for coupon validation rules."""

from ordering.coupon.validation import validate_coupon
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/coupon_validation.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{user_id}" validates "{code}" for an order of {value:g}'))
def validate_without_method(outcome, user_id, code, value):
    outcome["validation"] = validate_coupon(code, value, user_id=user_id)


@when(parsers.cfparse('customer "{user_id}" validates "{code}" for an order of {value:g} paying with "{method}"'))
def validate_with_method(outcome, user_id, code, value, method):
    outcome["validation"] = validate_coupon(code, value, payment_method=method, user_id=user_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the coupon is accepted with a discount of {discount:g}"))
def coupon_accepted(outcome, discount):
    validation = outcome["validation"]
    assert validation.valid, validation.message
    assert validation.discount_amount == discount


@then(parsers.cfparse("the final amount is {amount:g}"))
def final_amount(outcome, amount):
    assert outcome["validation"].final_amount == amount


@then(parsers.cfparse('the coupon is rejected with "{message}"'))
def coupon_rejected(outcome, message):
    validation = outcome["validation"]
    assert not validation.valid
    assert validation.message == message
