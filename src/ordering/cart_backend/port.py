"""Remote cart backend port (abstract interface).

The remote cart is authoritative for signed-in customers. Every call
returns a ``BackendResult`` whose value is the full cart after the call,
parsed into a ``CartState`` with ``source="remote"``.
"""

from abc import ABC, abstractmethod

from ordering.cart.line import CartLine, CartState
from ordering.results import BackendResult
from ordering.state import Identity


def parse_cart_payload(payload: dict) -> CartState:
    """Parse a ``{items, totalAmount}`` cart document.

    Each item carries either a populated product document
    (``{_id, name, price, images: [{url}]}``) or a bare product id with the
    price on the item. The server's ``totalAmount`` is ignored; the total is
    always derived from the lines.

    Raises ``KeyError``, ``TypeError``, ``ValueError`` or ``AttributeError`` on
    malformed input, and ``ValidationError`` when a line breaks the cart rules.
    """
    lines = []
    for item in payload["items"]:
        product = item["product"]
        if isinstance(product, dict):
            images = product.get("images") or []
            lines.append(
                CartLine(
                    product_id=str(product.get("_id") or product["id"]),
                    unit_price=float(item.get("price", product.get("price"))),
                    quantity=int(item["quantity"]),
                    display_name=product.get("name"),
                    image_ref=images[0].get("url") if images else None,
                )
            )
        else:
            lines.append(
                CartLine(
                    product_id=str(product),
                    unit_price=float(item["price"]),
                    quantity=int(item["quantity"]),
                )
            )
    return CartState(lines, source="remote")


class CartBackend(ABC):
    """Abstract remote cart API."""

    @abstractmethod
    def fetch(self, identity: Identity) -> BackendResult:
        """GET /cart"""
        ...

    @abstractmethod
    def add_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        """POST /cart/add merges into an existing line for the product."""
        ...

    @abstractmethod
    def update_item(self, identity: Identity, product_id: str, quantity: int) -> BackendResult:
        """PUT /cart/update"""
        ...

    @abstractmethod
    def remove_item(self, identity: Identity, product_id: str) -> BackendResult:
        """DELETE /cart/remove/{product_id}"""
        ...

    @abstractmethod
    def clear(self, identity: Identity) -> BackendResult:
        """DELETE /cart/clear"""
        ...
