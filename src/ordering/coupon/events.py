"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Coupon")
class CouponRedeemed:
    """A customer used a coupon on an order."""

    __version__ = 1

    code = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    order_value = Float(required=True)
    discount_applied = Float(required=True)
    usage_count = Integer(required=True)
    redeemed_at = DateTime(required=True)
