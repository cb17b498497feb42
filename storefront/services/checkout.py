# storefront/services/checkout.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from storefront.core.errors import CheckoutFailed, EmptyCart, NotFound, PersistenceError
from storefront.models.order import Order, OrderLine, ORDER_STATUS_PENDING
from storefront.services.cart_store import CartStore
from storefront.services.notifier import Notifier, OutgoingEmail
from storefront.services.order_store import OrderStore
from storefront.services.products import ProductLookup

logger = logging.getLogger(__name__)

# Receives (fn, *args) and runs fn(*args) at some later point, e.g. BackgroundTasks.add_task
Scheduler = Callable[..., Any]


@dataclass
class OrderReceipt:
    order_id: str
    total_amount: float


class CheckoutService:
    """
    Turns a user's cart into an order.

    Steps (all under the user's cart lock):
      1. Load cart; EmptyCart if it has no lines.
      2. Resolve current prices; unresolvable lines are kept without a price
         and left out of the total, with a warning.
      3. Compute the total.
      4. Persist the order (failure -> CheckoutFailed, cart untouched).
      5. Delete the cart (failure is logged, the order stands).
    Once the lock is released the confirmation emails are composed, quoting
    the new order id, and handed to `schedule`. Neither composing nor sending
    can delay or undo the order.
    """

    def __init__(self, carts: CartStore, orders: OrderStore, products: ProductLookup, notifier: Notifier):
        self.carts = carts
        self.orders = orders
        self.products = products
        self.notifier = notifier

    def _resolve_lines(self, cart) -> List[OrderLine]:
        lines = []
        for item in cart.items:
            try:
                product = self.products.get(item.product_id)
            except PersistenceError as e:
                logger.warning("Lookup of product %s failed during checkout: %s", item.product_id, e)
                product = None
            if product is None:
                logger.warning(
                    "Cart line %s x %d of user %s has no catalog entry; ordered without a price",
                    item.product_id, item.quantity, cart.user_id,
                )
                lines.append(OrderLine(product_id=item.product_id, quantity=item.quantity))
                continue
            lines.append(OrderLine(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=product.price,
                title=product.name,
            ))
        return lines

    def place_order(self, user: Dict[str, Any], schedule: Optional[Scheduler] = None) -> OrderReceipt:
        user_id = str(user.get("id") or "")
        with self.carts.locked(user_id):
            cart = self.carts.get(user_id)
            if cart.is_empty():
                raise EmptyCart()

            lines = self._resolve_lines(cart)
            total = round(sum(it.line_total() for it in lines), 2)
            order = Order(
                user_id=user_id,
                items=lines,
                total_amount=total,
                status=ORDER_STATUS_PENDING,
                created_at=datetime.utcnow(),
            )

            try:
                order_id = self.orders.append(order)
            except PersistenceError as e:
                logger.error("Order for user %s could not be stored: %s", user_id, e)
                raise CheckoutFailed() from e

            try:
                self.carts.clear(user_id)
            except (NotFound, PersistenceError) as e:
                logger.warning("Order %s stored but cart of user %s was not cleared: %s", order_id, user_id, e)

        # composed once the order id is known so the email can quote it
        emails = self._compose(user, order)
        self._send(emails, schedule)
        logger.info("Order %s placed by user %s, total %.2f", order_id, user_id, total)
        return OrderReceipt(order_id=order_id, total_amount=total)

    def _compose(self, user: Dict[str, Any], order: Order) -> List[OutgoingEmail]:
        try:
            return self.notifier.order_placed_emails(user, order)
        except Exception:
            logger.exception("Could not compose confirmation emails for order %s", order.id)
            return []

    def _send(self, emails: List[OutgoingEmail], schedule: Optional[Scheduler]) -> None:
        if not emails:
            return
        if schedule is None:
            self.notifier.dispatch(emails)
            return
        try:
            schedule(self.notifier.dispatch, emails)
        except Exception:
            logger.exception("Could not schedule order confirmation emails")
