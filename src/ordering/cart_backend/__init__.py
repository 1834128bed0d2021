"""Cart backend factory.

Uses FakeCartBackend by default. Set CART_BACKEND=http to talk to the
storefront API at STOREFRONT_API_URL.
"""

import os

from ordering.cart_backend.port import CartBackend

_current_backend: CartBackend | None = None


def get_cart_backend() -> CartBackend:
    global _current_backend
    if _current_backend is None:
        adapter = os.environ.get("CART_BACKEND", "fake")
        if adapter == "fake":
            from ordering.cart_backend.fake_adapter import FakeCartBackend

            _current_backend = FakeCartBackend()
        elif adapter == "http":
            from ordering.cart_backend.http_adapter import HttpCartBackend

            _current_backend = HttpCartBackend(os.environ.get("STOREFRONT_API_URL", "http://localhost:8000"))
        else:
            raise ValueError(f"Unknown cart backend: {adapter}")
    return _current_backend


def set_cart_backend(backend: CartBackend) -> None:
    global _current_backend
    _current_backend = backend


def reset_cart_backend() -> None:
    global _current_backend
    _current_backend = None
