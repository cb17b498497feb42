"""
Domain errors for the cart-to-order lifecycle.

Each error carries a stable machine-readable ``code`` and the HTTP status the
API answers with, so clients can branch on the condition rather than on the
status code alone.
"""
from typing import Optional


class StorefrontError(Exception):
    code = "storefront_error"
    status_code = 500
    default_message = "Unexpected storefront error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgument(StorefrontError):
    code = "invalid_argument"
    status_code = 400
    default_message = "Invalid or missing argument"


class NotFound(StorefrontError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class EmptyCart(StorefrontError):
    code = "empty_cart"
    status_code = 400
    default_message = "Cart is empty"


class PersistenceError(StorefrontError):
    code = "persistence_error"
    status_code = 500
    default_message = "Storage failure, please retry"


class CheckoutFailed(StorefrontError):
    code = "checkout_failed"
    status_code = 500
    default_message = "Could not place order, your cart was not changed; please retry"
