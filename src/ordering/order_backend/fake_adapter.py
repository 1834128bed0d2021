"""Configurable fake order backend for development and testing."""

from uuid import uuid4

from ordering.order_backend.port import OrderBackend
from ordering.results import BackendResult
from ordering.state import Identity


class FakeOrderBackend(OrderBackend):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Failed to create order"
        self.orders: list[dict] = []
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Failed to create order") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, identity: Identity | None, payload: dict) -> BackendResult:
        self.calls.append(
            {
                "method": "create_order",
                "user_id": identity.user_id if identity else None,
                "payload": payload,
            }
        )
        if not self.should_succeed:
            return BackendResult.unavailable(self.failure_reason)

        record = {"_id": f"fake_ord_{uuid4().hex[:12]}", "status": "pending", **payload}
        self.orders.append(record)
        return BackendResult.success(record)
