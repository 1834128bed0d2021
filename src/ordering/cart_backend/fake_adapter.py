"""Configurable in-memory cart backend for development and testing.

Holds one cart per customer and a small product catalogue. It can be
switched into a failure mode at runtime to exercise the reconciliation
fallbacks:

- ``"network"``: the server cannot be reached
- ``"server"``: the server answers with a 5xx
- ``"unauthorized"``: the session token is rejected (401)

Individual products can also be made to fail, which is how partial guest
cart migrations are simulated.
"""

from ordering.cart.line import CartState, ProductSnapshot
from ordering.cart_backend.port import CartBackend
from ordering.results import BackendResult
from ordering.state import Identity

_FAILURES = {
    "network": lambda: BackendResult.unavailable("Network Error"),
    "server": lambda: BackendResult.unavailable("Internal Server Error"),
    "unauthorized": lambda: BackendResult.unauthorized("Authentication required"),
}


class FakeCartBackend(CartBackend):
    def __init__(self, products: list[ProductSnapshot] | None = None) -> None:
        self.products: dict[str, ProductSnapshot] = {p.product_id: p for p in products or []}
        self.stock: dict[str, int] = {}
        self.carts: dict[str, CartState] = {}
        self.failure: str | None = None
        self.failing_products: set[str] = set()
        self.calls: list[dict] = []

    def configure(self, failure: str | None = None, failing_products=()) -> None:
        """Configure backend behavior at runtime. ``failure=None`` restores service."""
        if failure is not None and failure not in _FAILURES:
            raise ValueError(f"Unknown failure mode: {failure}")
        self.failure = failure
        self.failing_products = set(failing_products)

    def add_product(self, product: ProductSnapshot, stock: int | None = None) -> None:
        self.products[product.product_id] = product
        if stock is not None:
            self.stock[product.product_id] = stock

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _record(self, method: str, identity: Identity, **kwargs) -> BackendResult | None:
        self.calls.append({"method": method, "user_id": identity.user_id, **kwargs})
        if self.failure is not None:
            return _FAILURES[self.failure]()
        if kwargs.get("product_id") in self.failing_products:
            return BackendResult.unavailable("Network Error")
        return None

    def _cart(self, identity: Identity) -> CartState:
        return self.carts.get(identity.user_id, CartState.empty(source="remote"))

    def _store(self, identity: Identity, cart: CartState) -> BackendResult:
        self.carts[identity.user_id] = cart.relabelled("remote")
        return BackendResult.success(self.carts[identity.user_id])

    # -------------------------------------------------------------------
    # CartBackend
    # -------------------------------------------------------------------
    def fetch(self, identity: Identity) -> BackendResult:
        failed = self._record("fetch", identity)
        if failed:
            return failed
        return BackendResult.success(self._cart(identity))

    def add_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        failed = self._record("add_item", identity, product_id=product_id, quantity=quantity)
        if failed:
            return failed

        product = self.products.get(product_id)
        if product is None:
            return BackendResult.rejected("Product not found", status_code=404)

        cart = self._cart(identity)
        existing = cart.line_for(product_id)
        wanted = quantity + (existing.quantity if existing else 0)
        if product_id in self.stock and self.stock[product_id] < wanted:
            return BackendResult.rejected("Insufficient stock", status_code=400)

        return self._store(identity, cart.with_added(product.to_line(quantity)))

    def update_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        failed = self._record("update_item", identity, product_id=product_id, quantity=quantity)
        if failed:
            return failed

        cart = self._cart(identity)
        if cart.line_for(product_id) is None:
            return BackendResult.rejected("Item not found in cart", status_code=404)
        return self._store(identity, cart.with_quantity(product_id, quantity))

    def remove_item(self, identity: Identity, product_id: str) -> BackendResult:
        failed = self._record("remove_item", identity, product_id=product_id)
        if failed:
            return failed
        return self._store(identity, self._cart(identity).without(product_id))

    def clear(self, identity: Identity) -> BackendResult:
        failed = self._record("clear", identity)
        if failed:
            return failed
        return self._store(identity, CartState.empty(source="remote"))
