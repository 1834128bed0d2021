"""Order backend factory.

Uses FakeOrderBackend by default. Set ORDER_BACKEND=http to post orders
to STOREFRONT_API_URL.
"""

import os

from ordering.order_backend.port import OrderBackend

_current_backend: OrderBackend | None = None


def get_order_backend() -> OrderBackend:
    global _current_backend
    if _current_backend is None:
        adapter = os.environ.get("ORDER_BACKEND", "fake")
        if adapter == "fake":
            from ordering.order_backend.fake_adapter import FakeOrderBackend

            _current_backend = FakeOrderBackend()
        elif adapter == "http":
            from ordering.order_backend.http_adapter import HttpOrderBackend

            _current_backend = HttpOrderBackend(os.environ.get("STOREFRONT_API_URL", "http://localhost:8000"))
        else:
            raise ValueError(f"Unknown order backend: {adapter}")
    return _current_backend


def set_order_backend(backend: OrderBackend) -> None:
    global _current_backend
    _current_backend = backend


def reset_order_backend() -> None:
    global _current_backend
    _current_backend = None
