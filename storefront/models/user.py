# storefront/models/user.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


def is_truthy(raw: Any) -> bool:
    # is_admin might be stored as 'True'/'False' strings in CSV; normalize
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes", "y", "t")
    return False


@dataclass
class User:
    """
    Domain model for a shopper account.
    The FileBackedDB stores values as strings; from_dict normalizes them.
    """
    name: str
    email: str
    password_hash: str = ""
    is_admin: bool = False
    created_at: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        if d is None:
            raise ValueError("Cannot construct User from None")
        return cls(
            name=str(d.get("name") or ""),
            email=str(d.get("email") or "").lower(),
            password_hash=str(d.get("password_hash") or ""),
            is_admin=is_truthy(d.get("is_admin", False)),
            created_at=d.get("created_at") or None,
            id=d.get("id") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain dict suitable for writing back to CSV.
        Note: password_hash is included (necessary for persistence) - strip in APIs.
        """
        return asdict(self)
