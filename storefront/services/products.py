# storefront/services/products.py
from typing import Dict, Iterable, List, Optional

from storefront.database import FileBackedDB
from storefront.models.product import Product


class ProductLookup:
    """
    Read-only view over the products table. The cart and checkout only ever
    resolve products through this class.
    """

    TABLE = "products"

    def __init__(self, db: FileBackedDB):
        self.db = db

    def get(self, product_id: str) -> Optional[Product]:
        """Current catalog entry for product_id, or None. Storage failures raise PersistenceError."""
        if not product_id:
            return None
        row = self.db.get_record(self.TABLE, "id", product_id)
        return Product.from_dict(row) if row else None

    def get_many(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Resolve several ids with a single table read; unknown ids are absent from the result."""
        wanted = {str(p) for p in product_ids}
        if not wanted:
            return {}
        out = {}
        for row in self.db.list_records(self.TABLE):
            if str(row.get("id")) in wanted:
                product = Product.from_dict(row)
                out[product.id] = product
        return out

    def search(self, q: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        results = []
        for row in self.db.list_records(self.TABLE):
            product = Product.from_dict(row)
            if q and q.lower() not in product.name.lower():
                continue
            if category and category.lower() != product.category.lower():
                continue
            results.append(product)
        return results
