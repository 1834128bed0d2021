"""Pydantic request/response schemas for the coupon API.

These are the external contracts the storefront client speaks. Field
names are camelCase on the wire and snake_case in Python.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------
class CouponOfferSchema(WireModel):
    code: str
    title: str | None = None
    description: str | None = None
    discount_type: str
    discount_value: float
    max_discount: float | None = None
    min_order_value: float = 0.0
    payment_methods: list[str] = Field(default_factory=list)
    priority: int = 0


# ---------------------------------------------------------------------------
# Validate
# ---------------------------------------------------------------------------
class ValidateCouponRequest(WireModel):
    code: str
    order_value: float = Field(ge=0)
    products: list[str] | None = None
    payment_method: str | None = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "code": "WELCOME10",
                    "orderValue": 6000,
                    "products": ["prod-001"],
                    "paymentMethod": "upi",
                }
            ]
        },
    }


class CouponSummarySchema(WireModel):
    code: str
    title: str | None = None
    discount_type: str
    discount_value: float


class ValidateCouponResponse(WireModel):
    valid: bool
    coupon: CouponSummarySchema | None = None
    discount_amount: float | None = None
    final_amount: float | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------
class ApplyCouponRequest(WireModel):
    code: str
    order_value: float = Field(ge=0)
    discount_applied: float = Field(ge=0)


class MessageResponse(BaseModel):
    message: str
