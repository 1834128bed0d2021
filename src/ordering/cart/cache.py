"""Persistent cart cache on top of client storage.

Cart lines live under a fixed storage key, one entry per identity scope:
``storefront.cart:guest`` for the anonymous cart and
``storefront.cart:user:<id>`` for the local mirror of a customer's remote
cart. Product details are cached separately so a line can be rebuilt from
a bare product id.
"""

import json

import structlog
from protean.exceptions import ValidationError

from ordering.cart.line import CartState, ProductSnapshot
from ordering.storage.port import KeyValueStore

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "storefront.cart"
PRODUCT_CACHE_KEY = "storefront.products"

GUEST_SCOPE = "guest"


def user_scope(user_id: str) -> str:
    return f"user:{user_id}"


class CartCache:
    """Reads and writes cart lines for one scope at a time."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def key_for(scope: str) -> str:
        return f"{CART_STORAGE_KEY}:{scope}"

    def load(self, scope: str) -> CartState:
        raw = self.store.get(self.key_for(scope))
        if not raw:
            return CartState.empty(source="local")
        try:
            return CartState.from_entries(json.loads(raw), source="local")
        except (json.JSONDecodeError, TypeError, ValidationError):
            logger.warning("Discarding unreadable cached cart", scope=scope)
            self.store.remove(self.key_for(scope))
            return CartState.empty(source="local")

    def save(self, scope: str, state: CartState) -> None:
        self.store.set(self.key_for(scope), json.dumps(state.to_entries()))

    def clear(self, scope: str) -> None:
        self.store.remove(self.key_for(scope))


class ProductCache:
    """Product details keyed by product id, shared by every scope."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _load(self) -> dict:
        raw = self.store.get(PRODUCT_CACHE_KEY)
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return {}

    def remember(self, product: ProductSnapshot) -> None:
        products = self._load()
        products[product.product_id] = {
            "product_id": product.product_id,
            "name": product.name,
            "price": product.price,
            "image_ref": product.image_ref,
        }
        self.store.set(PRODUCT_CACHE_KEY, json.dumps(products))

    def lookup(self, product_id: str) -> ProductSnapshot | None:
        entry = self._load().get(str(product_id))
        if entry is None:
            return None
        return ProductSnapshot(**entry)
