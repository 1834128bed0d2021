"""Development coupons, matching the storefront's launch promotions."""

from datetime import UTC, datetime, timedelta

import structlog
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon, CouponType, DiscountType
from ordering.coupon.validation import find_coupon

logger = structlog.get_logger(__name__)


def _launch_coupons(now):
    valid_from = now - timedelta(days=1)
    valid_until = now + timedelta(days=30)
    return [
        Coupon.create(
            code="WELCOME10",
            title="Welcome Offer 10% OFF",
            description="Get 10% off on your first order",
            coupon_type=CouponType.WELCOME.value,
            discount_type=DiscountType.PERCENTAGE.value,
            discount_value=10,
            max_discount=200,
            min_order_value=500,
            valid_from=valid_from,
            valid_until=valid_until,
            user_usage_limit=1,
            priority=10,
        ),
        Coupon.create(
            code="UPI50",
            title="UPI Flat Rs 50 OFF",
            description="Flat Rs 50 off on UPI payments",
            coupon_type=CouponType.BANK.value,
            discount_type=DiscountType.FIXED.value,
            discount_value=50,
            min_order_value=300,
            valid_from=valid_from,
            valid_until=valid_until,
            user_usage_limit=3,
            payment_methods=["upi"],
            priority=8,
        ),
        Coupon.create(
            code="LOYALTY100",
            title="Loyalty Flat Rs 100 OFF",
            description="Flat Rs 100 off for loyal customers",
            coupon_type=CouponType.LOYALTY.value,
            discount_type=DiscountType.FIXED.value,
            discount_value=100,
            min_order_value=800,
            valid_from=valid_from,
            valid_until=valid_until,
            user_usage_limit=2,
            priority=9,
        ),
    ]


def seed_coupons(now=None) -> list[str]:
    """Add the launch coupons that are not already present. Returns the codes added."""
    now = now or datetime.now(UTC)
    repo = current_domain.repository_for(Coupon)
    added = []
    for coupon in _launch_coupons(now):
        if find_coupon(coupon.code) is None:
            repo.add(coupon)
            added.append(coupon.code)
    logger.info("Seeded coupons", codes=added)
    return added
