"""HTTP order backend adapter built on requests."""

import requests
import structlog

from ordering.cart_backend.http_adapter import error_message
from ordering.order_backend.port import OrderBackend
from ordering.results import BackendResult, classify_status
from ordering.state import Identity

logger = structlog.get_logger(__name__)


class HttpOrderBackend(OrderBackend):
    def __init__(self, base_url: str, session: requests.Session | None = None, timeout: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def create_order(self, identity: Identity | None, payload: dict) -> BackendResult:
        headers = {"Authorization": f"Bearer {identity.token}"} if identity else {}
        try:
            response = self.session.post(
                f"{self.base_url}/orders", json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("Order backend unreachable", order_id=payload.get("orderId"), error=str(exc))
            return BackendResult.unavailable(str(exc) or "Network Error")

        if not response.ok:
            return classify_status(response.status_code, error_message(response))
        try:
            return BackendResult.success(response.json())
        except ValueError:
            return BackendResult.unavailable("Malformed order response")
