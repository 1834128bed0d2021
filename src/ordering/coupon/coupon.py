"""Coupon aggregate: promotional discounts and their redemption history.

A coupon is identified by its upper-cased code. It is "currently valid"
while it is active, inside its validity window and below its overall
usage limit. Redemptions are recorded as ``CouponUsage`` entities so
per-customer limits can be enforced.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.coupon.events import CouponRedeemed
from ordering.domain import ordering


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponType(Enum):
    WELCOME = "welcome"
    FLASH = "flash"
    BANK = "bank"
    LOYALTY = "loyalty"
    REFERRAL = "referral"
    SEASONAL = "seasonal"


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix the two."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


@dataclass(frozen=True)
class CouponSnapshot:
    """The parts of a coupon a checkout needs to display and audit a discount."""

    code: str
    title: str | None
    discount_type: str
    discount_value: float
    max_discount: float | None = None
    payment_methods: tuple[str, ...] = ()


@ordering.entity(part_of="Coupon")
class CouponUsage:
    user_id = Identifier(required=True)
    used_at = DateTime(required=True)
    order_value = Float(required=True, min_value=0.0)
    discount_applied = Float(required=True, min_value=0.0)


@ordering.aggregate
class Coupon:
    code = String(identifier=True, max_length=50)
    title = String(max_length=100)
    description = String(max_length=500)
    coupon_type = String(choices=CouponType, default=CouponType.WELCOME.value)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True, min_value=0.0)
    max_discount = Float(min_value=0.0)
    min_order_value = Float(default=0.0, min_value=0.0)
    valid_from = DateTime(required=True)
    valid_until = DateTime(required=True)
    usage_limit = Integer(min_value=1)  # None means unlimited
    usage_count = Integer(default=0, min_value=0)
    user_usage_limit = Integer(default=1, min_value=1)
    payment_methods = Text()  # JSON array of normalized method tags, empty = any
    applicable_products = Text()  # JSON array, empty = every product
    excluded_products = Text()  # JSON array
    specific_users = Text()  # JSON array, empty = every customer
    is_active = Boolean(default=True)
    priority = Integer(default=0)
    usages = HasMany(CouponUsage)

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.valid_from and self.valid_until and as_utc(self.valid_until) <= as_utc(self.valid_from):
            raise ValidationError({"valid_until": ["Coupon must expire after it becomes valid"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        valid_from,
        valid_until,
        payment_methods=(),
        applicable_products=(),
        excluded_products=(),
        specific_users=(),
        **kwargs,
    ):
        return cls(
            code=normalize_code(code),
            discount_type=discount_type,
            discount_value=discount_value,
            valid_from=valid_from,
            valid_until=valid_until,
            payment_methods=json.dumps([m.lower() for m in payment_methods]),
            applicable_products=json.dumps([str(p) for p in applicable_products]),
            excluded_products=json.dumps([str(p) for p in excluded_products]),
            specific_users=json.dumps([str(u) for u in specific_users]),
            **kwargs,
        )

    # -------------------------------------------------------------------
    # Decoded collections
    # -------------------------------------------------------------------
    @staticmethod
    def _decode(raw):
        return json.loads(raw) if raw else []

    @property
    def allowed_payment_methods(self) -> list[str]:
        return self._decode(self.payment_methods)

    @property
    def applicable_product_ids(self) -> list[str]:
        return self._decode(self.applicable_products)

    @property
    def excluded_product_ids(self) -> list[str]:
        return self._decode(self.excluded_products)

    @property
    def targeted_user_ids(self) -> list[str]:
        return self._decode(self.specific_users)

    # -------------------------------------------------------------------
    # Validity
    # -------------------------------------------------------------------
    def is_within_window(self, now=None) -> bool:
        now = as_utc(now or datetime.now(UTC))
        return as_utc(self.valid_from) <= now <= as_utc(self.valid_until)

    @property
    def usage_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def is_currently_valid(self, now=None) -> bool:
        return bool(self.is_active) and self.is_within_window(now) and not self.usage_exhausted

    def uses_by(self, user_id) -> int:
        return sum(1 for usage in self.usages if str(usage.user_id) == str(user_id))

    def is_exhausted_for(self, user_id) -> bool:
        return self.uses_by(user_id) >= self.user_usage_limit

    def is_offered_to(self, user_id) -> bool:
        targeted = self.targeted_user_ids
        return not targeted or str(user_id) in targeted

    # -------------------------------------------------------------------
    # Eligibility and discount
    # -------------------------------------------------------------------
    def rejection_reason(self, order_value, payment_method=None, product_ids=None, user_id=None, now=None):
        """Return the first rule this order breaks, or None when the coupon applies."""
        if not self.is_active or not self.is_within_window(now):
            return "Coupon has expired or not yet valid"

        if self.usage_exhausted:
            return "Coupon usage limit exceeded"

        if order_value < (self.min_order_value or 0.0):
            return f"Minimum order value should be ₹{format_amount(self.min_order_value)}"

        if user_id is not None:
            if self.is_exhausted_for(user_id):
                return "You have already used this coupon"
            if not self.is_offered_to(user_id):
                return "This coupon is not available for your account"

        allowed = self.allowed_payment_methods
        if payment_method and allowed and payment_method not in allowed:
            return f"This coupon is only valid for {', '.join(allowed)} payments"

        if product_ids:
            product_ids = [str(p) for p in product_ids]
            excluded = set(self.excluded_product_ids)
            applicable = set(self.applicable_product_ids)
            eligible = [p for p in product_ids if p not in excluded and (not applicable or p in applicable)]
            if not eligible:
                return "This coupon is not applicable to the products in your cart"

        return None

    def compute_discount(self, order_value: float) -> float:
        """Discount for ``order_value``, never more than the order itself."""
        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = order_value * self.discount_value / 100
            if self.max_discount is not None:
                discount = min(discount, self.max_discount)
        else:
            discount = self.discount_value
        return round(max(0.0, min(discount, order_value)), 2)

    def snapshot(self) -> CouponSnapshot:
        return CouponSnapshot(
            code=self.code,
            title=self.title,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            max_discount=self.max_discount,
            payment_methods=tuple(self.allowed_payment_methods),
        )

    # -------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------
    def redeem(self, user_id, order_value, discount_applied, now=None):
        """Record that a customer used this coupon on an order."""
        now = now or datetime.now(UTC)
        if not self.is_currently_valid(now):
            raise ValidationError({"code": ["Coupon has expired or is no longer available"]})
        if self.is_exhausted_for(user_id):
            raise ValidationError({"code": ["You have already used this coupon"]})

        self.add_usages(
            CouponUsage(
                user_id=user_id,
                used_at=now,
                order_value=order_value,
                discount_applied=discount_applied,
            )
        )
        self.usage_count += 1

        self.raise_(
            CouponRedeemed(
                code=self.code,
                user_id=str(user_id),
                order_value=order_value,
                discount_applied=discount_applied,
                usage_count=self.usage_count,
                redeemed_at=now,
            )
        )
