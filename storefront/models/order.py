# storefront/models/order.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from datetime import datetime
import json


ORDER_STATUS_PENDING = "pending"


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        try:
            return datetime.strptime(str(raw), "%Y-%m-%d %H:%M:%S")
        except ValueError:
            return None


@dataclass
class OrderLine:
    """
    One purchased line. unit_price and title are the catalog values at checkout
    time; unit_price is None when the product could not be resolved and the
    line was left out of the total.
    """
    product_id: str
    quantity: int = 1
    unit_price: Optional[float] = None
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OrderLine":
        raw_price = d.get("unit_price")
        return cls(
            product_id=str(d.get("product_id") or ""),
            quantity=int(float(d.get("quantity") or 0)),
            unit_price=None if raw_price in (None, "") else float(raw_price),
            title=d.get("title") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "unit_price": None if self.unit_price is None else float(self.unit_price),
            "quantity": int(self.quantity),
        }

    @property
    def resolved(self) -> bool:
        return self.unit_price is not None

    def line_total(self) -> float:
        if self.unit_price is None:
            return 0.0
        return float(self.unit_price) * int(self.quantity)


@dataclass
class Order:
    """
    Immutable record of a completed checkout. `items` and `total_amount` never
    change after creation; `status` belongs to fulfillment.
    """
    user_id: str
    items: List[OrderLine] = field(default_factory=list)
    total_amount: float = 0.0
    status: str = ORDER_STATUS_PENDING
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Order":
        if d is None:
            raise ValueError("Cannot construct Order from None")
        # items are stored as a serialized JSON string in the CSV cell
        raw_items = d.get("items") or []
        if isinstance(raw_items, str):
            try:
                raw_items = json.loads(raw_items)
            except ValueError:
                raw_items = []
        items = [it if isinstance(it, OrderLine) else OrderLine.from_dict(it)
                 for it in raw_items if isinstance(it, (dict, OrderLine))]

        try:
            total_amount = float(d.get("total_amount") or 0.0)
        except (TypeError, ValueError):
            total_amount = 0.0

        return cls(
            id=d.get("id") or None,
            user_id=str(d.get("user_id") or ""),
            items=items,
            total_amount=total_amount,
            status=d.get("status") or ORDER_STATUS_PENDING,
            created_at=_parse_datetime(d.get("created_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the order into a dict suitable for CSV writing. `items` is serialized as a JSON string.
        """
        out = {
            "user_id": self.user_id,
            "items": json.dumps([it.to_dict() for it in self.items], ensure_ascii=False),
            "total_amount": float(self.total_amount),
            "status": self.status,
            "created_at": self.created_at.isoformat(sep=" ") if self.created_at else "",
        }
        if self.id:
            out["id"] = self.id
        return out

    def to_public(self) -> Dict[str, Any]:
        """Shape returned by the API: items as a list, ISO timestamp."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": [it.to_dict() for it in self.items],
            "total_amount": float(self.total_amount),
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
