# storefront/models/cart.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
import json

from storefront.core.errors import NotFound


@dataclass
class CartLine:
    product_id: str
    quantity: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CartLine":
        if d is None:
            raise ValueError("Cannot construct CartLine from None")
        product_id = str(d.get("product_id") or d.get("productId") or "")
        try:
            quantity = int(float(d.get("quantity") or 0))
        except (TypeError, ValueError):
            quantity = 0
        return cls(product_id=product_id, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {"product_id": self.product_id, "quantity": int(self.quantity)}


@dataclass
class Cart:
    """
    A user's cart. Stored as a single row in the carts table with 'items'
    serialized as JSON (list of CartLine dicts).

    Lines keep their insertion order, product_id is unique among them and no
    line is ever kept with a quantity below 1.
    """
    user_id: str
    id: Optional[str] = None
    items: List[CartLine] = field(default_factory=list)
    updated_at: Optional[str] = None
    version: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Cart":
        if d is None:
            raise ValueError("Cannot construct Cart from None")
        raw_items = d.get("items") or []
        if isinstance(raw_items, str):
            try:
                raw_items = json.loads(raw_items)
            except ValueError:
                raw_items = []
            if not isinstance(raw_items, list):
                raw_items = []
        items = []
        for it in raw_items:
            line = it if isinstance(it, CartLine) else CartLine.from_dict(it)
            # rows written by hand may carry zero lines; they are not part of the cart
            if line.product_id and line.quantity > 0:
                items.append(line)
        try:
            version = int(float(d.get("version") or 0))
        except (TypeError, ValueError):
            version = 0
        return cls(
            user_id=str(d.get("user_id") or ""),
            id=d.get("id") or None,
            items=items,
            updated_at=d.get("updated_at") or None,
            version=version,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id or "",
            "user_id": self.user_id,
            "items": json.dumps([it.to_dict() for it in self.items], ensure_ascii=False),
            "updated_at": self.updated_at or "",
            "version": int(self.version),
        }

    # business helpers

    def find(self, product_id: str) -> Optional[CartLine]:
        for it in self.items:
            if it.product_id == product_id:
                return it
        return None

    def _require(self, product_id: str) -> CartLine:
        line = self.find(product_id)
        if line is None:
            raise NotFound("Item not found in cart")
        return line

    def add(self, product_id: str, quantity: int = 1) -> None:
        # merge by key: an existing line is incremented, never overwritten
        line = self.find(product_id)
        if line is not None:
            line.quantity += int(quantity)
            return
        self.items.append(CartLine(product_id=product_id, quantity=int(quantity)))

    def set_quantity(self, product_id: str, quantity: int) -> None:
        line = self._require(product_id)
        if quantity == 0:
            self.remove(product_id)
        else:
            line.quantity = int(quantity)

    def decrement(self, product_id: str) -> None:
        line = self._require(product_id)
        line.quantity -= 1
        if line.quantity <= 0:
            self.remove(product_id)

    def remove(self, product_id: str) -> bool:
        """Drop the line for product_id. Returns True if a line was removed."""
        before = len(self.items)
        self.items = [it for it in self.items if it.product_id != product_id]
        return len(self.items) != before

    def is_empty(self) -> bool:
        return not self.items
