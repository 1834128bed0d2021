"""Cart reconciliation service: one cart API for guests and customers.

Exactly one backing store is authoritative at any time:

- ``ActiveStore.GUEST``: the cart lives in the local cache under the guest
  scope.
- ``ActiveStore.REMOTE``: the server cart is authoritative. Every remote
  answer is written through to a local mirror under the customer's scope,
  which is read only when the server cannot be used.

Fallback is decided here and nowhere else. A recoverable backend error
(unreachable server, 5xx, 401, malformed body) applies the same change to
the local mirror so the cart action never appears to fail. A fatal error
(validation, missing product, insufficient stock) is raised as a
``ValidationError`` with the backend's message.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean.exceptions import ValidationError

from ordering.cart.cache import GUEST_SCOPE, CartCache, ProductCache, user_scope
from ordering.cart.line import CartState, ProductSnapshot
from ordering.cart_backend.port import CartBackend
from ordering.results import BackendResult
from ordering.state import Identity, StorefrontState

logger = structlog.get_logger(__name__)


class ActiveStore(Enum):
    GUEST = "guest"
    REMOTE = "remote"


@dataclass(frozen=True)
class MigrationReport:
    """Product ids moved into the remote cart on sign-in, and those that were not."""

    migrated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class CartService:
    def __init__(
        self,
        state: StorefrontState,
        backend: CartBackend,
        cache: CartCache,
        products: ProductCache,
    ) -> None:
        self.state = state
        self.backend = backend
        self.cache = cache
        self.products = products
        self._active = ActiveStore.GUEST

    @property
    def active_store(self) -> ActiveStore:
        return self._active

    @property
    def _local_scope(self) -> str:
        if self._active == ActiveStore.REMOTE:
            return user_scope(self.state.identity.user_id)
        return GUEST_SCOPE

    # -------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------
    def start_session(self, identity: Identity | None = None) -> CartState:
        """Pick the authoritative store for this visit and load the cart."""
        if identity is not None and identity.is_valid():
            self.state.identity = identity
            self._active = ActiveStore.REMOTE
        else:
            if identity is not None:
                logger.info("Ignoring expired identity, using guest cart", user_id=identity.user_id)
            self.state.identity = None
            self._active = ActiveStore.GUEST
        logger.debug("Cart session started", active_store=self._active.value)
        return self.get()

    def authenticate(self, identity: Identity) -> MigrationReport:
        """Switch to the remote cart and move guest lines into it.

        Lines are migrated one at a time. A line the server rejects is
        logged and dropped; a line that fails because the server is
        unavailable is kept in the customer's local mirror. Lines already
        migrated stay migrated. The guest cache is cleared once every line
        has been attempted.
        """
        if not identity.is_valid():
            raise ValidationError({"identity": ["Identity is missing or expired"]})

        guest_cart = self.cache.load(GUEST_SCOPE)
        self.state.identity = identity
        self._active = ActiveStore.REMOTE

        migrated, failed, pending = [], [], []
        for line in guest_cart.lines:
            result = self.backend.add_item(identity, line.product_id, line.quantity)
            if result.ok:
                migrated.append(line.product_id)
                self._settle(result, "migrate", lambda cart: cart, product_id=line.product_id)
                continue

            failed.append(line.product_id)
            if not result.fatal:
                pending.append(line)
            logger.warning(
                "Guest cart line failed to migrate",
                user_id=identity.user_id,
                product_id=line.product_id,
                quantity=line.quantity,
                kept_locally=not result.fatal,
                error=result.error.message,
            )

        self.cache.clear(GUEST_SCOPE)
        logger.info(
            "Guest cart migrated",
            user_id=identity.user_id,
            migrated=len(migrated),
            failed=len(failed),
        )

        if pending:

            def keep_pending(cart: CartState) -> CartState:
                for line in pending:
                    cart = cart.with_added(line)
                return cart

            self._apply_locally(keep_pending)
        else:
            self.get()
        return MigrationReport(migrated=migrated, failed=failed)

    def sign_out(self) -> CartState:
        """Drop the customer's local mirror and fall back to the guest cart."""
        if self.state.identity is not None:
            self.cache.clear(user_scope(self.state.identity.user_id))
        self.state.identity = None
        self._active = ActiveStore.GUEST
        return self.get()

    # -------------------------------------------------------------------
    # Cart operations
    # -------------------------------------------------------------------
    def get(self) -> CartState:
        if self._active == ActiveStore.REMOTE:
            result = self.backend.fetch(self.state.identity)
            return self._settle(result, "get", lambda cart: cart)
        return self._publish(self.cache.load(GUEST_SCOPE))

    def add(self, product_id: str, quantity: int = 1, product: ProductSnapshot | None = None) -> CartState:
        """Add ``quantity`` of a product, merging with an existing line."""
        product_id = str(product_id)
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if product is not None:
            self.products.remember(product)

        def add_locally(cart: CartState, offline: bool = False) -> CartState:
            existing = cart.line_for(product_id)
            if existing is not None:
                return cart.with_added(existing.with_quantity(quantity))
            snapshot = product or self.products.lookup(product_id)
            if snapshot is None:
                if not offline:
                    raise ValidationError({"product_id": [f"Product details for {product_id} are not available"]})
                # Replaced by the server's line on the next successful answer
                snapshot = ProductSnapshot.placeholder(product_id)
            return cart.with_added(snapshot.to_line(quantity))

        if self._active == ActiveStore.REMOTE:
            result = self.backend.add_item(self.state.identity, product_id, quantity)
            return self._settle(
                result,
                "add",
                lambda cart: add_locally(cart, offline=True),
                product_id=product_id,
            )
        return self._apply_locally(add_locally)

    def update(self, product_id: str, quantity: int) -> CartState:
        """Set a line's quantity. Anything below 1 is a removal."""
        product_id = str(product_id)
        if quantity < 1:
            return self.remove(product_id)

        def update_locally(cart: CartState) -> CartState:
            return cart.with_quantity(product_id, quantity)

        if self._active == ActiveStore.REMOTE:
            result = self.backend.update_item(self.state.identity, product_id, quantity)
            return self._settle(result, "update", update_locally, product_id=product_id)
        return self._apply_locally(update_locally)

    def remove(self, product_id: str) -> CartState:
        product_id = str(product_id)

        def remove_locally(cart: CartState) -> CartState:
            return cart.without(product_id)

        if self._active == ActiveStore.REMOTE:
            result = self.backend.remove_item(self.state.identity, product_id)
            return self._settle(result, "remove", remove_locally, product_id=product_id)
        return self._apply_locally(remove_locally)

    def clear(self) -> CartState:
        """Empty the cart in every representation this session knows about."""

        def clear_locally(cart: CartState) -> CartState:
            return CartState.empty(source=cart.source)

        if self._active == ActiveStore.REMOTE:
            result = self.backend.clear(self.state.identity)
            cart = self._settle(result, "clear", clear_locally)
        else:
            cart = self._apply_locally(clear_locally)
        self.cache.clear(GUEST_SCOPE)
        return cart

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _settle(self, result: BackendResult, operation: str, local_change, **log_fields) -> CartState:
        """Turn a remote result into the cart on display, falling back if needed."""
        if result.ok:
            cart = result.value
            self.cache.save(self._local_scope, cart)
            for line in cart.lines:
                self.products.remember(
                    ProductSnapshot(
                        product_id=line.product_id,
                        name=line.display_name or line.product_id,
                        price=line.unit_price,
                        image_ref=line.image_ref,
                    )
                )
            return self._publish(cart)

        if result.fatal:
            logger.info("Cart operation rejected", operation=operation, error=result.error.message, **log_fields)
            raise ValidationError({"cart": [result.error.message]})

        logger.warning(
            "Cart backend unavailable, using local cart",
            operation=operation,
            kind=result.error.kind.value,
            error=result.error.message,
            **log_fields,
        )
        return self._apply_locally(local_change)

    def _apply_locally(self, change) -> CartState:
        scope = self._local_scope
        cart = change(self.cache.load(scope)).relabelled("local")
        self.cache.save(scope, cart)
        return self._publish(cart)

    def _publish(self, cart: CartState) -> CartState:
        self.state.replace_cart(cart)
        return cart
