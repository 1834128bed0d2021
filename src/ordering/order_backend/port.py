"""Order backend port (abstract interface).

Order creation is the last step of checkout and happens only after a
payment succeeded. The order record returned by the backend is opaque to
the storefront core.
"""

from abc import ABC, abstractmethod

from ordering.results import BackendResult
from ordering.state import Identity


class OrderBackend(ABC):
    @abstractmethod
    def create_order(self, identity: Identity | None, payload: dict) -> BackendResult:
        """POST /orders: value is the created order record."""
        ...
