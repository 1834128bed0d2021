"""Coupon backend factory.

Uses DomainCouponBackend by default. Set COUPON_BACKEND=http to call the
coupon API at STOREFRONT_API_URL.
"""

import os

from ordering.coupon_backend.port import CouponBackend

_current_backend: CouponBackend | None = None


def get_coupon_backend() -> CouponBackend:
    global _current_backend
    if _current_backend is None:
        adapter = os.environ.get("COUPON_BACKEND", "domain")
        if adapter == "domain":
            from ordering.coupon_backend.domain_adapter import DomainCouponBackend

            _current_backend = DomainCouponBackend()
        elif adapter == "http":
            from ordering.coupon_backend.http_adapter import HttpCouponBackend

            _current_backend = HttpCouponBackend(os.environ.get("STOREFRONT_API_URL", "http://localhost:8000"))
        else:
            raise ValueError(f"Unknown coupon backend: {adapter}")
    return _current_backend


def set_coupon_backend(backend: CouponBackend) -> None:
    global _current_backend
    _current_backend = backend


def reset_coupon_backend() -> None:
    global _current_backend
    _current_backend = None
