"""HTTP coupon backend adapter built on requests."""

import requests
import structlog

from ordering.cart_backend.http_adapter import error_message
from ordering.coupon.coupon import CouponSnapshot
from ordering.coupon.validation import CouponValidation
from ordering.coupon_backend.port import CouponBackend, CouponOffer, require_identity
from ordering.results import BackendResult, classify_status
from ordering.state import Identity

logger = structlog.get_logger(__name__)


def offer_from_payload(item: dict) -> CouponOffer:
    return CouponOffer(
        code=item["code"],
        title=item.get("title"),
        description=item.get("description"),
        discount_type=item["discountType"],
        discount_value=float(item["discountValue"]),
        max_discount=item.get("maxDiscount"),
        min_order_value=float(item.get("minOrderValue") or 0),
        payment_methods=tuple(item.get("paymentMethods") or ()),
        priority=int(item.get("priority") or 0),
    )


def validation_from_payload(body: dict, order_value: float) -> CouponValidation:
    if not body.get("valid"):
        return CouponValidation.rejected(body.get("message") or "Invalid coupon code", order_value)
    coupon = body["coupon"]
    return CouponValidation(
        valid=True,
        coupon=CouponSnapshot(
            code=coupon["code"],
            title=coupon.get("title"),
            discount_type=coupon["discountType"],
            discount_value=float(coupon["discountValue"]),
        ),
        order_value=order_value,
        discount_amount=float(body["discountAmount"]),
        final_amount=float(body["finalAmount"]),
    )


class HttpCouponBackend(CouponBackend):
    def __init__(self, base_url: str, session: requests.Session | None = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _send(self, method: str, path: str, identity: Identity | None = None, payload: dict | None = None):
        headers = {}
        if identity is not None:
            headers["Authorization"] = f"Bearer {identity.token}"
            headers["X-Customer-Id"] = identity.user_id
        return self.session.request(
            method, f"{self.base_url}{path}", json=payload, headers=headers, timeout=self.timeout
        )

    def _offers(self, path: str, identity: Identity | None = None) -> BackendResult:
        try:
            response = self._send("GET", path, identity)
        except requests.RequestException as exc:
            logger.warning("Coupon backend unreachable", path=path, error=str(exc))
            return BackendResult.unavailable(str(exc) or "Network Error")
        if not response.ok:
            return classify_status(response.status_code, error_message(response))
        try:
            return BackendResult.success([offer_from_payload(item) for item in response.json()])
        except (ValueError, KeyError, TypeError):
            return BackendResult.unavailable("Malformed coupon response")

    def list_offers(self) -> BackendResult:
        return self._offers("/coupons")

    def list_available(self, identity: Identity | None) -> BackendResult:
        return self._offers("/coupons/user/available", require_identity(identity))

    def validate(self, identity, code, order_value, payment_method=None, product_ids=None) -> BackendResult:
        identity = require_identity(identity)
        payload = {"code": code, "orderValue": order_value}
        if payment_method:
            payload["paymentMethod"] = payment_method
        if product_ids:
            payload["products"] = list(product_ids)

        try:
            response = self._send("POST", "/coupons/validate", identity, payload)
        except requests.RequestException as exc:
            logger.warning("Coupon backend unreachable", path="/coupons/validate", error=str(exc))
            return BackendResult.unavailable(str(exc) or "Network Error")

        # Rejected coupons come back as 400/404 with {valid: false, message}
        if response.status_code in (400, 404):
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and "valid" in body:
                return BackendResult.success(validation_from_payload(body, order_value))
        if not response.ok:
            return classify_status(response.status_code, error_message(response))
        try:
            return BackendResult.success(validation_from_payload(response.json(), order_value))
        except (ValueError, KeyError, TypeError):
            return BackendResult.unavailable("Malformed coupon response")

    def apply(self, identity, code, order_value, discount_applied) -> BackendResult:
        identity = require_identity(identity)
        payload = {"code": code, "orderValue": order_value, "discountApplied": discount_applied}
        try:
            response = self._send("POST", "/coupons/apply", identity, payload)
        except requests.RequestException as exc:
            logger.warning("Coupon backend unreachable", path="/coupons/apply", error=str(exc))
            return BackendResult.unavailable(str(exc) or "Network Error")
        if not response.ok:
            return classify_status(response.status_code, error_message(response))
        return BackendResult.success(None)
