# storefront/models/product.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Product:
    """
    Catalog entry as seen by the cart. CSV-backed store will usually store
    everything as strings, so from_dict converts to proper types.
    """
    id: str
    name: str = ""
    price: float = 0.0
    discount: float = 0.0
    category: str = "general"
    image: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")

        def _num(raw: Any) -> float:
            try:
                return float(raw) if raw not in (None, "") else 0.0
            except (TypeError, ValueError):
                return 0.0

        return cls(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or d.get("title") or ""),
            price=_num(d.get("price")),
            discount=_num(d.get("discount")),
            category=str(d.get("category") or "general"),
            image=d.get("image") or None,
            created_at=d.get("created_at") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
