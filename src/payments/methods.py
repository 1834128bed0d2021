"""Payment-method normalization.

Coupons restrict eligibility by a small set of method tags. Provider ids
are collapsed onto those tags before any coupon rule sees them, so a
coupon restricted to ``upi`` accepts every UPI-style app.
"""

from enum import Enum


class PaymentMethodTag(Enum):
    CARD = "card"
    UPI = "upi"
    WALLET = "wallet"
    COD = "cod"
    NETBANKING = "netbanking"


_PROVIDER_TAGS = {
    "stripe": PaymentMethodTag.CARD.value,
    "paypal": PaymentMethodTag.CARD.value,
    "googlepay": PaymentMethodTag.UPI.value,
    "razorpay": PaymentMethodTag.UPI.value,
    "phonepe": PaymentMethodTag.UPI.value,
    "paytm": PaymentMethodTag.WALLET.value,
}


def normalize_payment_method(provider_id: str | None) -> str | None:
    """Return the eligibility tag for a provider id.

    Unknown ids pass through lower-cased, so the tags themselves
    (``upi``, ``cod``, ``card``) normalize to themselves.
    """
    if not provider_id:
        return None
    provider_id = provider_id.strip().lower()
    return _PROVIDER_TAGS.get(provider_id, provider_id)
