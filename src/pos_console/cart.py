"""In-memory sale cart built over a catalog snapshot."""

from __future__ import annotations

import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Iterable, Iterator, Optional

from .exceptions import CartBusyError, CartLineNotFoundError, CartNotFoundError, InvalidQuantityError
from .logging_config import get_logger

logger = get_logger("cart")

PRODUCT = "product"
SERVICE = "service"


@dataclass
class CartLine:
    item_type: str
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    unit: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Ordered product/service lines, at most one per ``(item_type, item_id)``.

    Products and services are looked up in the snapshot handed to
    :meth:`load_catalog`; anything missing from it cannot be added. Every
    mutation holds :attr:`lock`, and :meth:`checkout_guard` keeps a second
    checkout (or an edit) out while a commit is running.
    """

    def __init__(
        self,
        products: Iterable[Any] = (),
        services: Iterable[Any] = (),
        branch_id: Optional[int] = None,
    ) -> None:
        self.branch_id = branch_id
        # Last checkout workflow state, surfaced to the screen alongside the lines.
        self.status = "idle"
        self.lines: list[CartLine] = []
        self.lock = threading.RLock()
        self.touched_at = 0.0
        self._products: dict[int, Any] = {}
        self._services: dict[int, Any] = {}
        self.load_catalog(products, services)

    def load_catalog(self, products: Iterable[Any] = (), services: Iterable[Any] = ()) -> None:
        with self.lock:
            self._products = {product.id: product for product in products}
            self._services = {service.id: service for service in services}

    @contextmanager
    def checkout_guard(self) -> Iterator["Cart"]:
        """Hold the cart for one commit; raise :class:`CartBusyError` if it is already held."""

        if not self.lock.acquire(blocking=False):
            raise CartBusyError("Cart is busy with another request")
        try:
            yield self
        finally:
            self.lock.release()

    def __len__(self) -> int:
        return len(self.lines)

    def is_empty(self) -> bool:
        return not self.lines

    def contains(self, item_type: str, item_id: int) -> bool:
        return any(line.item_type == item_type and line.item_id == item_id for line in self.lines)

    def add_product(self, product_id: int, qty: int = 1) -> bool:
        """Append a product line; unknown or already present products are ignored."""

        if qty < 1:
            raise InvalidQuantityError("Quantity must be at least 1")
        with self.lock:
            product = self._products.get(product_id)
            if product is None or self.contains(PRODUCT, product_id):
                return False
            self.lines.append(
                CartLine(
                    item_type=PRODUCT,
                    item_id=product_id,
                    name=product.name,
                    quantity=qty,
                    unit_price=Decimal(product.selling_price),
                    unit=product.unit,
                )
            )
            return True

    def add_service(self, service_id: int) -> bool:
        """Append a single-unit service line; unknown or duplicate services are ignored."""

        with self.lock:
            service = self._services.get(service_id)
            if service is None or self.contains(SERVICE, service_id):
                return False
            self.lines.append(
                CartLine(
                    item_type=SERVICE,
                    item_id=service_id,
                    name=service.name,
                    quantity=1,
                    unit_price=Decimal(service.base_price),
                )
            )
            return True

    def _line(self, line_index: int) -> CartLine:
        if line_index < 0 or line_index >= len(self.lines):
            raise CartLineNotFoundError(f"Cart has no line {line_index}")
        return self.lines[line_index]

    def update_quantity(self, line_index: int, qty: int) -> CartLine:
        if qty < 1:
            raise InvalidQuantityError("Quantity must be at least 1")
        with self.lock:
            line = self._line(line_index)
            line.quantity = qty
            return line

    def remove_line(self, line_index: int) -> CartLine:
        with self.lock:
            line = self._line(line_index)
            del self.lines[line_index]
            return line

    def product_lines(self) -> list[CartLine]:
        return [line for line in self.lines if line.item_type == PRODUCT]

    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    def clear(self) -> None:
        with self.lock:
            self.lines.clear()


@dataclass
class CartRegistry:
    """Open carts of this process, keyed by a generated id.

    Carts untouched for ``max_idle`` seconds are dropped, and opening a cart
    beyond ``max_carts`` drops the least recently used one.
    """

    max_idle: Optional[float] = None
    max_carts: Optional[int] = None
    clock: Callable[[], float] = time.monotonic
    _carts: dict[str, Cart] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def _evict(self, now: float) -> None:
        if self.max_idle is not None:
            for cart_id, cart in list(self._carts.items()):
                if now - cart.touched_at > self.max_idle:
                    del self._carts[cart_id]
                    logger.info("Dropped cart %s after %.0fs idle", cart_id, now - cart.touched_at)
        if self.max_carts is not None:
            while self._carts and len(self._carts) >= self.max_carts:
                cart_id = min(self._carts, key=lambda key: self._carts[key].touched_at)
                del self._carts[cart_id]
                logger.warning("Dropped cart %s: %s carts open", cart_id, self.max_carts)

    def open(self, branch_id: Optional[int] = None) -> tuple[str, Cart]:
        cart_id = uuid.uuid4().hex
        cart = Cart(branch_id=branch_id)
        with self._lock:
            now = self.clock()
            self._evict(now)
            cart.touched_at = now
            self._carts[cart_id] = cart
        return cart_id, cart

    def get(self, cart_id: str) -> Cart:
        with self._lock:
            now = self.clock()
            self._evict(now)
            cart = self._carts.get(cart_id)
            if cart is not None:
                cart.touched_at = now
        if cart is None:
            raise CartNotFoundError(f"Cart {cart_id} not found")
        return cart

    def discard(self, cart_id: str) -> None:
        with self._lock:
            if self._carts.pop(cart_id, None) is None:
                raise CartNotFoundError(f"Cart {cart_id} not found")

    def __len__(self) -> int:
        with self._lock:
            return len(self._carts)
