# storefront/services/order_store.py
from typing import List
import logging

from storefront.core.errors import PersistenceError
from storefront.database import FileBackedDB
from storefront.models.order import Order

logger = logging.getLogger(__name__)


class OrderStore:
    """Append-only order history. Orders are written once and never updated here."""

    TABLE = "orders"

    def __init__(self, db: FileBackedDB):
        self.db = db

    def append(self, order: Order) -> str:
        if order.id:
            raise ValueError("Order already persisted")
        saved = self.db.create_record(self.TABLE, order.to_dict(), id_field="id")
        if not saved or not saved.get("id"):
            raise PersistenceError("Failed to create order")
        order.id = saved["id"]
        logger.info("Order %s stored for user %s (total %.2f)", order.id, order.user_id, order.total_amount)
        return order.id

    def list_by_user(self, user_id: str) -> List[Order]:
        """All orders of user_id, most recent first."""
        orders = [Order.from_dict(r) for r in self.db.find_records(self.TABLE, "user_id", str(user_id))]
        # later rows first among equal timestamps; sorted() keeps that order for ties
        orders.reverse()
        return sorted(orders, key=lambda o: o.created_at.isoformat() if o.created_at else "", reverse=True)
