"""Exceptions surfaced to the storefront UI."""


class SignInRequired(Exception):
    """Raised when an accountable operation is attempted without an identity."""

    def __init__(self, message: str = "Please sign in to apply coupons") -> None:
        super().__init__(message)
        self.message = message


class OrderCreationFailed(Exception):
    """Payment was captured but the order could not be recorded.

    The customer must be told to check their orders or contact support;
    paying again would charge them twice.
    """

    def __init__(self, order_id: str, transaction_id: str | None, reason: str) -> None:
        self.order_id = order_id
        self.transaction_id = transaction_id
        self.reason = reason
        self.message = (
            "Your payment was received but we could not record your order. "
            "Please check your orders or contact support before paying again."
        )
        super().__init__(self.message)
