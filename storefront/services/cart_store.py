# storefront/services/cart_store.py
"""
Per-user cart storage.

Every mutation is one atomic unit: the user's cart lock is held while
FileBackedDB.apply_record reads, changes and rewrites the row under the carts
table file lock. Two concurrent adds for the same user therefore never both
read the old quantity.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional
import logging
import re
import threading

from storefront.core.errors import InvalidArgument, NotFound, PersistenceError
from storefront.database import FileBackedDB
from storefront.models.cart import Cart
from storefront.services.products import ProductLookup

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"-?[0-9]+")


def parse_quantity(raw: Any, allow_zero: bool = False) -> int:
    """
    Accept ints, integral floats and digit strings. Booleans, fractions and
    anything else raise InvalidArgument, as do values below the allowed minimum.
    """
    minimum = 0 if allow_zero else 1
    if isinstance(raw, bool) or raw is None:
        raise InvalidArgument("Quantity must be an integer")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and _INT_RE.fullmatch(raw.strip()):
        value = int(raw.strip())
    else:
        raise InvalidArgument("Quantity must be an integer")
    if value < minimum:
        if allow_zero:
            raise InvalidArgument("Quantity cannot be negative")
        raise InvalidArgument("Quantity must be a positive integer")
    return value


class CartStore:
    TABLE = "carts"

    def __init__(self, db: FileBackedDB, products: ProductLookup, lock_timeout: Optional[float] = None):
        self.db = db
        self.products = products
        self.lock_timeout = db.lock_timeout if lock_timeout is None else lock_timeout
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.RLock()
            return lock

    @contextmanager
    def locked(self, user_id: str) -> Iterator[None]:
        """Hold the user's cart lock. Re-entrant, so store calls inside the block are fine."""
        lock = self._lock_for(str(user_id))
        if not lock.acquire(timeout=self.lock_timeout):
            logger.error("Timed out waiting for cart lock of user %s", user_id)
            raise PersistenceError("Cart is busy, please retry")
        try:
            yield
        finally:
            lock.release()

    def _mutate(self, user_id: str, change: Callable[[Cart], Optional[bool]], create: bool = False) -> Cart:
        """
        Apply `change` to the user's cart as a single read-modify-write.
        A `change` returning False reports that nothing changed; the row is kept as is.
        """
        user_id = str(user_id)

        def apply(row: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            if row is None:
                if not create:
                    raise NotFound("Cart not found")
                cart = Cart(user_id=user_id)
            else:
                cart = Cart.from_dict(row)
            if change(cart) is False and row is not None:
                return row
            cart.version += 1
            cart.updated_at = datetime.utcnow().isoformat(sep=" ")
            return cart.to_dict()

        with self.locked(user_id):
            stored = self.db.apply_record(self.TABLE, "user_id", user_id, apply)
        return Cart.from_dict(stored)

    # --- queries ---

    def get(self, user_id: str) -> Cart:
        row = self.db.get_record(self.TABLE, "user_id", str(user_id))
        if not row:
            return Cart(user_id=str(user_id))
        return Cart.from_dict(row)

    # --- commands ---

    def add(self, user_id: str, product_id: Optional[str], quantity: Any = 1) -> Cart:
        if not product_id:
            raise InvalidArgument("Product ID is required")
        qty = parse_quantity(1 if quantity is None else quantity)
        if self.products.get(str(product_id)) is None:
            raise NotFound("Product not found")
        cart = self._mutate(user_id, lambda c: c.add(str(product_id), qty), create=True)
        logger.info("Cart of user %s: +%d x %s", user_id, qty, product_id)
        return cart

    def set_quantity(self, user_id: str, product_id: Optional[str], quantity: Any) -> Cart:
        if not product_id or quantity is None:
            raise InvalidArgument("Product ID and quantity are required")
        qty = parse_quantity(quantity, allow_zero=True)
        return self._mutate(user_id, lambda c: c.set_quantity(str(product_id), qty))

    def decrement(self, user_id: str, product_id: Optional[str]) -> Cart:
        if not product_id:
            raise InvalidArgument("Product ID is required")
        return self._mutate(user_id, lambda c: c.decrement(str(product_id)))

    def remove(self, user_id: str, product_id: Optional[str]) -> Cart:
        if not product_id:
            raise InvalidArgument("Product ID is required")
        return self._mutate(user_id, lambda c: c.remove(str(product_id)))

    def clear(self, user_id: str) -> None:
        with self.locked(str(user_id)):
            deleted = self.db.delete_record(self.TABLE, "user_id", str(user_id))
        if not deleted:
            raise NotFound("Cart not found or already empty")
        logger.info("Cart of user %s cleared", user_id)
