# storefront/api/deps.py
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer

from storefront.config import settings
from storefront.core.security import decode_access_token
from storefront.database import db, FileBackedDB
from storefront.models.user import is_truthy
from storefront.services.cart_store import CartStore
from storefront.services.checkout import CheckoutService
from storefront.services.notifier import Notifier
from storefront.services.order_store import OrderStore
from storefront.services.products import ProductLookup

# auto_error=False: a missing header falls back to the auth cookie
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

# shared so every request sees the same per-user cart locks
_products = ProductLookup(db)
_cart_store = CartStore(db, _products)
_order_store = OrderStore(db)
_notifier = Notifier.from_settings(settings)


def get_db() -> FileBackedDB:
    """
    Dependency that returns the file-backed DB object.
    Usage:
        db = Depends(get_db)
    """
    return db


def get_products() -> ProductLookup:
    return _products


def get_cart_store() -> CartStore:
    return _cart_store


def get_order_store() -> OrderStore:
    return _order_store


def get_notifier() -> Notifier:
    return _notifier


def get_checkout(
    carts: CartStore = Depends(get_cart_store),
    orders: OrderStore = Depends(get_order_store),
    products: ProductLookup = Depends(get_products),
    notifier: Notifier = Depends(get_notifier),
) -> CheckoutService:
    return CheckoutService(carts, orders, products, notifier)


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: FileBackedDB = Depends(get_db),
) -> Dict[str, Any]:
    """
    Resolve current user from the Authorization header (Bearer) or from the auth cookie.
    Returns the user row as a dict without its password hash. Raises 401 if not authenticated.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized. No valid token provided.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    raw = token or request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not raw:
        raise credentials_exception

    user_id = decode_access_token(raw)
    if not user_id:
        raise credentials_exception

    user_row = db.get_record("users", "id", user_id)
    if not user_row:
        raise credentials_exception

    user_row.pop("password_hash", None)
    user_row["is_admin"] = is_truthy(user_row.get("is_admin", False))
    return user_row


def require_admin(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """
    Dependency to require admin privileges. Raises 403 if user is not admin.
    """
    if not current_user.get("is_admin"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return current_user
