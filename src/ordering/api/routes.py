"""FastAPI routes for coupons.

Browsing offers is public. Validating and applying a coupon require the
caller's identity in the ``X-Customer-Id`` header.
"""

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    ApplyCouponRequest,
    CouponOfferSchema,
    CouponSummarySchema,
    MessageResponse,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from ordering.coupon.coupon import Coupon
from ordering.coupon.redemption import RedeemCoupon
from ordering.coupon.validation import (
    INVALID_CODE_MESSAGE,
    find_coupon,
    list_active_coupons,
    list_available_coupons,
    validate_coupon,
)
from ordering.exceptions import SignInRequired
from ordering.utils.logging import add_context

coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


def current_customer(x_customer_id: str = Header(default="")) -> str:
    if not x_customer_id:
        raise HTTPException(status_code=401, detail=SignInRequired().message)
    add_context(customer_id=x_customer_id)
    return x_customer_id


def _offer(coupon: Coupon) -> CouponOfferSchema:
    return CouponOfferSchema(
        code=coupon.code,
        title=coupon.title,
        description=coupon.description,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        max_discount=coupon.max_discount,
        min_order_value=coupon.min_order_value or 0.0,
        payment_methods=coupon.allowed_payment_methods,
        priority=coupon.priority or 0,
    )


@coupon_router.get("", response_model=list[CouponOfferSchema])
async def list_coupons() -> list[CouponOfferSchema]:
    return [_offer(c) for c in list_active_coupons()]


@coupon_router.get("/user/available", response_model=list[CouponOfferSchema])
async def list_customer_coupons(customer_id: str = Depends(current_customer)) -> list[CouponOfferSchema]:
    return [_offer(c) for c in list_available_coupons(customer_id)]


@coupon_router.post("/validate", response_model=ValidateCouponResponse)
async def validate(body: ValidateCouponRequest, customer_id: str = Depends(current_customer)):
    result = validate_coupon(
        body.code,
        body.order_value,
        payment_method=body.payment_method,
        product_ids=body.products,
        user_id=customer_id,
    )
    if not result.valid:
        status_code = 404 if result.message == INVALID_CODE_MESSAGE else 400
        return JSONResponse(
            status_code=status_code,
            content=ValidateCouponResponse(valid=False, message=result.message).model_dump(by_alias=True),
        )

    return ValidateCouponResponse(
        valid=True,
        coupon=CouponSummarySchema(
            code=result.coupon.code,
            title=result.coupon.title,
            discount_type=result.coupon.discount_type,
            discount_value=result.coupon.discount_value,
        ),
        discount_amount=result.discount_amount,
        final_amount=result.final_amount,
    )


@coupon_router.post("/apply", response_model=MessageResponse)
async def apply(body: ApplyCouponRequest, customer_id: str = Depends(current_customer)) -> MessageResponse:
    if find_coupon(body.code) is None:
        raise HTTPException(status_code=404, detail="Coupon not found")

    try:
        current_domain.process(
            RedeemCoupon(
                code=body.code,
                user_id=customer_id,
                order_value=body.order_value,
                discount_applied=body.discount_applied,
            ),
            asynchronous=False,
        )
    except ValidationError as exc:
        messages = [msg for field_messages in exc.messages.values() for msg in field_messages]
        raise HTTPException(status_code=400, detail="; ".join(messages)) from exc
    return MessageResponse(message="Coupon applied successfully")
