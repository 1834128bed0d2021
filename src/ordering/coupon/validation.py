"""Coupon validation engine.

Validation is exploratory: it never changes a coupon. It answers whether a
code may be applied to an order of a given value, paid a given way, for a
given set of products, and what the discount would be. Recording a use is
the separate ``RedeemCoupon`` command.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon, CouponSnapshot, normalize_code
from payments.methods import normalize_payment_method

logger = structlog.get_logger(__name__)

INVALID_CODE_MESSAGE = "Invalid coupon code"


@dataclass(frozen=True)
class CouponValidation:
    valid: bool
    message: str | None = None
    coupon: CouponSnapshot | None = None
    order_value: float = 0.0
    discount_amount: float = 0.0
    final_amount: float | None = None

    @classmethod
    def rejected(cls, message: str, order_value: float = 0.0) -> "CouponValidation":
        return cls(valid=False, message=message, order_value=order_value)


def find_coupon(code: str) -> Coupon | None:
    code = normalize_code(code)
    if not code:
        return None
    try:
        return current_domain.repository_for(Coupon).get(code)
    except ObjectNotFoundError:
        return None


def validate_coupon(
    code: str,
    order_value: float,
    payment_method: str | None = None,
    product_ids=None,
    user_id: str | None = None,
    now: datetime | None = None,
) -> CouponValidation:
    """Check a coupon code against an order and compute its discount.

    ``payment_method`` may be a provider id or a method tag; it is
    normalized before any rule is checked.
    """
    now = now or datetime.now(UTC)
    coupon = find_coupon(code)
    if coupon is None:
        return CouponValidation.rejected(INVALID_CODE_MESSAGE, order_value)

    reason = coupon.rejection_reason(
        order_value,
        payment_method=normalize_payment_method(payment_method),
        product_ids=product_ids,
        user_id=user_id,
        now=now,
    )
    if reason is not None:
        logger.info("Coupon rejected", code=coupon.code, order_value=order_value, reason=reason)
        return CouponValidation.rejected(reason, order_value)

    discount = coupon.compute_discount(order_value)
    return CouponValidation(
        valid=True,
        coupon=coupon.snapshot(),
        order_value=order_value,
        discount_amount=discount,
        final_amount=round(order_value - discount, 2),
    )


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------
def _active_coupons() -> list[Coupon]:
    return current_domain.repository_for(Coupon)._dao.query.filter(is_active=True).all().items


def list_active_coupons(now: datetime | None = None) -> list[Coupon]:
    """Public offers: every currently valid coupon, highest priority first."""
    now = now or datetime.now(UTC)
    coupons = [c for c in _active_coupons() if c.is_currently_valid(now)]
    return sorted(coupons, key=lambda c: c.priority or 0, reverse=True)


def list_available_coupons(user_id: str, now: datetime | None = None) -> list[Coupon]:
    """Offers this customer can still use: targeted at them and not used up."""
    return [
        coupon
        for coupon in list_active_coupons(now)
        if coupon.is_offered_to(user_id) and not coupon.is_exhausted_for(user_id)
    ]
