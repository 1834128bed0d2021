"""Tests for Coupon eligibility rules, discount computation and redemption."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.coupon.coupon import Coupon, CouponUsage, DiscountType, format_amount, normalize_code
from ordering.coupon.events import CouponRedeemed
from protean.exceptions import ValidationError

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def _coupon(code="SAVE10", discount_type="percentage", discount_value=10, **overrides):
    fields = {
        "valid_from": NOW - timedelta(days=1),
        "valid_until": NOW + timedelta(days=30),
    }
    fields.update(overrides)
    return Coupon.create(code=code, discount_type=discount_type, discount_value=discount_value, **fields)


class TestCouponCreation:
    def test_code_is_normalized(self):
        coupon = _coupon(code="  welcome10 ")
        assert coupon.code == "WELCOME10"

    def test_defaults(self):
        coupon = _coupon()
        assert coupon.usage_count == 0
        assert coupon.user_usage_limit == 1
        assert coupon.is_active is True
        assert coupon.min_order_value == 0.0
        assert coupon.allowed_payment_methods == []

    def test_payment_methods_are_lower_cased(self):
        coupon = _coupon(payment_methods=["UPI", "Card"])
        assert coupon.allowed_payment_methods == ["upi", "card"]

    def test_percentage_above_hundred_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _coupon(discount_value=120)
        assert "discount_value" in exc.value.messages

    def test_fixed_discount_may_exceed_hundred(self):
        coupon = _coupon(discount_type="fixed", discount_value=250)
        assert coupon.discount_value == 250

    def test_window_must_be_ordered(self):
        with pytest.raises(ValidationError) as exc:
            _coupon(valid_from=NOW, valid_until=NOW - timedelta(hours=1))
        assert "valid_until" in exc.value.messages

    def test_unknown_discount_type_is_rejected(self):
        with pytest.raises(ValidationError):
            _coupon(discount_type="bogo")


class TestCouponValidity:
    def test_valid_inside_window(self):
        assert _coupon().is_currently_valid(NOW)

    def test_expired_coupon_is_not_valid_even_if_active(self):
        coupon = _coupon(valid_from=NOW - timedelta(days=10), valid_until=NOW - timedelta(days=1))
        assert coupon.is_active
        assert not coupon.is_currently_valid(NOW)

    def test_not_yet_started_coupon_is_not_valid(self):
        coupon = _coupon(valid_from=NOW + timedelta(days=1), valid_until=NOW + timedelta(days=2))
        assert not coupon.is_currently_valid(NOW)

    def test_inactive_coupon_is_not_valid(self):
        assert not _coupon(is_active=False).is_currently_valid(NOW)

    def test_exhausted_coupon_is_not_valid(self):
        coupon = _coupon(usage_limit=5, usage_count=5)
        assert coupon.usage_exhausted
        assert not coupon.is_currently_valid(NOW)

    def test_no_usage_limit_means_unlimited(self):
        coupon = _coupon(usage_count=10_000)
        assert not coupon.usage_exhausted

    def test_naive_window_is_treated_as_utc(self):
        coupon = _coupon(
            valid_from=datetime(2026, 6, 1),
            valid_until=datetime(2026, 7, 1),
        )
        assert coupon.is_within_window(NOW)


class TestRejectionReasons:
    def test_applicable_coupon_has_no_reason(self):
        assert _coupon().rejection_reason(1000, now=NOW) is None

    def test_expired(self):
        coupon = _coupon(valid_from=NOW - timedelta(days=10), valid_until=NOW - timedelta(days=1))
        assert coupon.rejection_reason(1000, now=NOW) == "Coupon has expired or not yet valid"

    def test_usage_limit(self):
        coupon = _coupon(usage_limit=1, usage_count=1)
        assert coupon.rejection_reason(1000, now=NOW) == "Coupon usage limit exceeded"

    def test_minimum_order_value_names_the_minimum(self):
        coupon = _coupon(min_order_value=1000)
        assert coupon.rejection_reason(999, now=NOW) == "Minimum order value should be ₹1000"

    def test_order_exactly_at_minimum_applies(self):
        coupon = _coupon(min_order_value=1000)
        assert coupon.rejection_reason(1000, now=NOW) is None

    def test_payment_method_outside_allowed_set(self):
        coupon = _coupon(payment_methods=["upi"])
        assert coupon.rejection_reason(1000, payment_method="card", now=NOW) == (
            "This coupon is only valid for upi payments"
        )

    def test_payment_method_inside_allowed_set(self):
        coupon = _coupon(payment_methods=["upi"])
        assert coupon.rejection_reason(1000, payment_method="upi", now=NOW) is None

    def test_no_payment_method_yet_skips_method_rule(self):
        coupon = _coupon(payment_methods=["upi"])
        assert coupon.rejection_reason(1000, payment_method=None, now=NOW) is None

    def test_customer_who_used_it_up(self):
        coupon = _coupon()
        coupon.redeem("cust-001", 1000, 100, now=NOW)
        assert coupon.rejection_reason(1000, user_id="cust-001", now=NOW) == "You have already used this coupon"
        assert coupon.rejection_reason(1000, user_id="cust-002", now=NOW) is None

    def test_targeted_coupon_for_another_customer(self):
        coupon = _coupon(specific_users=["cust-vip"])
        assert coupon.rejection_reason(1000, user_id="cust-001", now=NOW) == (
            "This coupon is not available for your account"
        )
        assert coupon.rejection_reason(1000, user_id="cust-vip", now=NOW) is None

    def test_only_excluded_products_in_cart(self):
        coupon = _coupon(excluded_products=["prod-001"])
        assert coupon.rejection_reason(1000, product_ids=["prod-001"], now=NOW) == (
            "This coupon is not applicable to the products in your cart"
        )
        assert coupon.rejection_reason(1000, product_ids=["prod-001", "prod-002"], now=NOW) is None

    def test_applicable_products_restrict_the_cart(self):
        coupon = _coupon(applicable_products=["prod-009"])
        assert coupon.rejection_reason(1000, product_ids=["prod-001"], now=NOW) is not None
        assert coupon.rejection_reason(1000, product_ids=["prod-009"], now=NOW) is None


class TestDiscountComputation:
    def test_percentage_discount(self):
        assert _coupon(discount_value=10).compute_discount(1000) == 100.0

    def test_percentage_discount_is_capped(self):
        coupon = _coupon(code="WELCOME10", discount_value=10, max_discount=500, min_order_value=1000)
        assert coupon.compute_discount(6000) == 500.0

    def test_fixed_discount(self):
        coupon = _coupon(code="FLAT100", discount_type=DiscountType.FIXED.value, discount_value=100)
        assert coupon.compute_discount(1000) == 100.0

    def test_discount_never_exceeds_order_value(self):
        coupon = _coupon(discount_type="fixed", discount_value=500)
        assert coupon.compute_discount(300) == 300.0

    def test_discount_is_never_negative(self):
        assert _coupon().compute_discount(0) == 0.0

    def test_discount_is_rounded(self):
        assert _coupon(discount_value=15).compute_discount(99.99) == 15.0


class TestRedemption:
    def test_redeem_records_usage_and_count(self):
        coupon = _coupon()
        coupon.redeem("cust-001", 1000, 100, now=NOW)

        assert coupon.usage_count == 1
        assert len(coupon.usages) == 1
        usage = coupon.usages[0]
        assert isinstance(usage, CouponUsage)
        assert str(usage.user_id) == "cust-001"
        assert usage.discount_applied == 100.0

    def test_redeem_raises_event(self):
        coupon = _coupon()
        coupon.redeem("cust-001", 1000, 100, now=NOW)

        events = [e for e in coupon._events if isinstance(e, CouponRedeemed)]
        assert len(events) == 1
        assert events[0].code == "SAVE10"
        assert events[0].usage_count == 1

    def test_per_customer_limit(self):
        coupon = _coupon(user_usage_limit=2)
        coupon.redeem("cust-001", 1000, 100, now=NOW)
        coupon.redeem("cust-001", 1000, 100, now=NOW)
        assert coupon.uses_by("cust-001") == 2
        with pytest.raises(ValidationError):
            coupon.redeem("cust-001", 1000, 100, now=NOW)

    def test_expired_coupon_cannot_be_redeemed(self):
        coupon = _coupon(valid_from=NOW - timedelta(days=10), valid_until=NOW - timedelta(days=1))
        with pytest.raises(ValidationError):
            coupon.redeem("cust-001", 1000, 100, now=NOW)

    def test_global_limit_reached_by_redemption(self):
        coupon = _coupon(usage_limit=1, user_usage_limit=5)
        coupon.redeem("cust-001", 1000, 100, now=NOW)
        assert coupon.usage_exhausted
        with pytest.raises(ValidationError):
            coupon.redeem("cust-002", 1000, 100, now=NOW)


class TestHelpers:
    def test_normalize_code(self):
        assert normalize_code(" flat100 ") == "FLAT100"
        assert normalize_code(None) == ""

    @pytest.mark.parametrize(("amount", "text"), [(1000, "1000"), (1000.0, "1000"), (499.5, "499.50")])
    def test_format_amount(self, amount, text):
        assert format_amount(amount) == text

    def test_snapshot_carries_discount_terms(self):
        snapshot = _coupon(payment_methods=["upi"], max_discount=200).snapshot()
        assert snapshot.code == "SAVE10"
        assert snapshot.discount_type == "percentage"
        assert snapshot.max_discount == 200.0
        assert snapshot.payment_methods == ("upi",)
