"""Coupon backend port (abstract interface).

Listing offers is public. Validating and applying a coupon are
accountable and need a signed-in identity; adapters raise
``SignInRequired`` before making any call without one.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ordering.exceptions import SignInRequired
from ordering.results import BackendResult
from ordering.state import Identity


@dataclass(frozen=True)
class CouponOffer:
    """A coupon as presented in an offers list."""

    code: str
    title: str | None
    description: str | None
    discount_type: str
    discount_value: float
    max_discount: float | None = None
    min_order_value: float = 0.0
    payment_methods: tuple[str, ...] = ()
    priority: int = 0


def require_identity(identity: Identity | None) -> Identity:
    if identity is None or not identity.is_valid():
        raise SignInRequired()
    return identity


class CouponBackend(ABC):
    @abstractmethod
    def list_offers(self) -> BackendResult:
        """GET /coupons: value is a list of ``CouponOffer``."""
        ...

    @abstractmethod
    def list_available(self, identity: Identity | None) -> BackendResult:
        """GET /coupons/user/available: offers this customer can still use."""
        ...

    @abstractmethod
    def validate(
        self,
        identity: Identity | None,
        code: str,
        order_value: float,
        payment_method: str | None = None,
        product_ids=None,
    ) -> BackendResult:
        """POST /coupons/validate: value is a ``CouponValidation``.

        A coupon that does not apply is a successful call whose validation
        has ``valid=False``; errors are reserved for calls that failed.
        """
        ...

    @abstractmethod
    def apply(self, identity: Identity | None, code: str, order_value: float, discount_applied: float) -> BackendResult:
        """POST /coupons/apply: records the use."""
        ...
