"""Cart line value object and the derived cart state.

A ``CartState`` is an ordered, product-unique sequence of ``CartLine``
values. Lines are never mutated in place: every change produces a new
line and a new state, so the total is always recomputed from the lines
that are actually present.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from ordering.domain import ordering


@ordering.value_object
class CartLine:
    """One product in the cart, with the price captured when it was added."""

    product_id = String(required=True, max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    display_name = String(max_length=255)
    image_ref = String(max_length=1024)

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLine":
        return CartLine(
            product_id=self.product_id,
            unit_price=self.unit_price,
            quantity=quantity,
            display_name=self.display_name,
            image_ref=self.image_ref,
        )


@dataclass(frozen=True)
class ProductSnapshot:
    """Product details needed to render a line; kept in the product cache."""

    product_id: str
    name: str
    price: float
    image_ref: str | None = None

    @classmethod
    def placeholder(cls, product_id: str) -> "ProductSnapshot":
        """Stand-in for a product whose details have never been seen."""
        return cls(product_id=product_id, name=f"Product {product_id[-4:]}", price=0.0)

    def to_line(self, quantity: int) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            unit_price=self.price,
            quantity=quantity,
            display_name=self.name,
            image_ref=self.image_ref,
        )


def cart_total(lines) -> float:
    return round(sum(line.subtotal for line in lines), 2)


class CartState:
    """Immutable view of a cart as produced by one backing store.

    ``source`` is ``"remote"`` when the server cart answered and ``"local"``
    when the lines came from the client-side cache.
    """

    def __init__(self, lines=(), source: str = "local") -> None:
        self.lines: tuple[CartLine, ...] = tuple(lines)
        self.source = source

        seen = set()
        for line in self.lines:
            if line.product_id in seen:
                raise ValidationError({"lines": [f"Duplicate cart line for product {line.product_id}"]})
            seen.add(line.product_id)

    @classmethod
    def empty(cls, source: str = "local") -> "CartState":
        return cls((), source=source)

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total_amount(self) -> float:
        return cart_total(self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def product_ids(self) -> list[str]:
        return [line.product_id for line in self.lines]

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, product_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.product_id == str(product_id)), None)

    # -------------------------------------------------------------------
    # Transitions (each returns a new state)
    # -------------------------------------------------------------------
    def with_added(self, line: CartLine) -> "CartState":
        """Add a line, merging by product id: quantities add up."""
        existing = self.line_for(line.product_id)
        if existing is None:
            return CartState((*self.lines, line), source=self.source)
        merged = existing.with_quantity(existing.quantity + line.quantity)
        return self._replacing(existing, merged)

    def with_quantity(self, product_id: str, quantity: int) -> "CartState":
        """Set a line's quantity; anything below 1 removes the line."""
        if quantity < 1:
            return self.without(product_id)
        existing = self.line_for(product_id)
        if existing is None:
            raise ValidationError({"product_id": [f"Product {product_id} is not in the cart"]})
        return self._replacing(existing, existing.with_quantity(quantity))

    def without(self, product_id: str) -> "CartState":
        return CartState(
            (line for line in self.lines if line.product_id != str(product_id)),
            source=self.source,
        )

    def relabelled(self, source: str) -> "CartState":
        return CartState(self.lines, source=source)

    def _replacing(self, old: CartLine, new: CartLine) -> "CartState":
        return CartState((new if line is old else line for line in self.lines), source=self.source)

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def to_entries(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]

    @classmethod
    def from_entries(cls, entries, source: str = "local") -> "CartState":
        return cls((CartLine(**entry) for entry in entries or []), source=source)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CartState):
            return NotImplemented
        return self.lines == other.lines

    def __repr__(self) -> str:
        return f"CartState(lines={len(self.lines)}, total_amount={self.total_amount}, source={self.source!r})"
