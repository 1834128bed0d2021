"""Coupon redemption: command and handler.

Redeeming is the accountable step of using a coupon: it appends a usage
record and bumps the coupon's usage count.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon, normalize_code
from ordering.domain import ordering


@ordering.command(part_of="Coupon")
class RedeemCoupon:
    """Record that a customer applied a coupon to an order."""

    code = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    order_value = Float(required=True, min_value=0.0)
    discount_applied = Float(required=True, min_value=0.0)


@ordering.command_handler(part_of=Coupon)
class RedeemCouponHandler:
    @handle(RedeemCoupon)
    def redeem_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        try:
            coupon = repo.get(normalize_code(command.code))
        except ObjectNotFoundError:
            raise ValidationError({"code": ["Invalid coupon code"]})

        coupon.redeem(
            user_id=command.user_id,
            order_value=command.order_value,
            discount_applied=command.discount_applied,
        )
        repo.add(coupon)
        return coupon.usage_count
