"""HTTP cart backend adapter built on requests.

Transport errors, 5xx answers and unparseable bodies become recoverable
``unavailable`` results, a 401 becomes ``unauthorized``, and any other
4xx is a fatal rejection carrying the server's message.
"""

import requests
import structlog
from protean.exceptions import ValidationError

from ordering.cart.line import CartState
from ordering.cart_backend.port import CartBackend, parse_cart_payload
from ordering.results import BackendResult, classify_status
from ordering.state import Identity

logger = structlog.get_logger(__name__)


def error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(body, dict):
        return body.get("message") or body.get("detail") or ""
    return ""


class HttpCartBackend(CartBackend):
    def __init__(self, base_url: str, session: requests.Session | None = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, identity: Identity, payload: dict | None = None) -> BackendResult:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers={"Authorization": f"Bearer {identity.token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Cart backend unreachable", method=method, url=url, error=str(exc))
            return BackendResult.unavailable(str(exc) or "Network Error")

        if not response.ok:
            return classify_status(response.status_code, error_message(response))

        if method == "DELETE" and path == "/cart/clear":
            return BackendResult.success(CartState.empty(source="remote"))

        try:
            return BackendResult.success(parse_cart_payload(response.json()))
        except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as exc:
            logger.warning("Malformed cart response", method=method, url=url, error=str(exc))
            return BackendResult.unavailable("Malformed cart response")

    def fetch(self, identity: Identity) -> BackendResult:
        return self._request("GET", "/cart", identity)

    def add_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        return self._request("POST", "/cart/add", identity, {"productId": product_id, "quantity": quantity})

    def update_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        return self._request("PUT", "/cart/update", identity, {"productId": product_id, "quantity": quantity})

    def remove_item(self, identity: Identity, product_id: str) -> BackendResult:
        return self._request("DELETE", f"/cart/remove/{product_id}", identity)

    def clear(self, identity: Identity) -> BackendResult:
        return self._request("DELETE", "/cart/clear", identity)
