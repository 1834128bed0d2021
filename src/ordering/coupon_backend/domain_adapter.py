"""In-process coupon backend that calls the ordering domain directly.

Used in development, in tests and by the API itself. The caller must
have the ordering domain context active.
"""

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon
from ordering.coupon.redemption import RedeemCoupon
from ordering.coupon.validation import list_active_coupons, list_available_coupons, validate_coupon
from ordering.coupon_backend.port import CouponBackend, CouponOffer, require_identity
from ordering.results import BackendResult
from ordering.state import Identity

logger = structlog.get_logger(__name__)


def offer_from(coupon: Coupon) -> CouponOffer:
    return CouponOffer(
        code=coupon.code,
        title=coupon.title,
        description=coupon.description,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        max_discount=coupon.max_discount,
        min_order_value=coupon.min_order_value or 0.0,
        payment_methods=tuple(coupon.allowed_payment_methods),
        priority=coupon.priority or 0,
    )


class DomainCouponBackend(CouponBackend):
    def list_offers(self) -> BackendResult:
        return BackendResult.success([offer_from(c) for c in list_active_coupons()])

    def list_available(self, identity: Identity | None) -> BackendResult:
        identity = require_identity(identity)
        return BackendResult.success([offer_from(c) for c in list_available_coupons(identity.user_id)])

    def validate(self, identity, code, order_value, payment_method=None, product_ids=None) -> BackendResult:
        identity = require_identity(identity)
        return BackendResult.success(
            validate_coupon(
                code,
                order_value,
                payment_method=payment_method,
                product_ids=product_ids,
                user_id=identity.user_id,
            )
        )

    def apply(self, identity, code, order_value, discount_applied) -> BackendResult:
        identity = require_identity(identity)
        try:
            usage_count = current_domain.process(
                RedeemCoupon(
                    code=code,
                    user_id=identity.user_id,
                    order_value=order_value,
                    discount_applied=discount_applied,
                ),
                asynchronous=False,
            )
        except ValidationError as exc:
            messages = [msg for field_messages in exc.messages.values() for msg in field_messages]
            logger.warning("Coupon redemption rejected", code=code, user_id=identity.user_id, errors=messages)
            return BackendResult.rejected("; ".join(messages) or "Coupon could not be applied")
        return BackendResult.success(usage_count)
