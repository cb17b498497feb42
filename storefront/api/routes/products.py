# storefront/api/routes/products.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_db, get_products, require_admin
from storefront.api.schemas.product import ProductCreate, ProductOut, ProductUpdate
from storefront.database import FileBackedDB
from storefront.models.product import Product
from storefront.services.products import ProductLookup

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    q: Optional[str] = Query(None, description="search query (name)"),
    category: Optional[str] = Query(None),
    limit: int = 100,
    offset: int = 0,
    products: ProductLookup = Depends(get_products),
):
    """
    List products. Supports optional name substring search via `q` and an exact `category` filter.
    """
    results = products.search(q=q, category=category)
    return [p.to_dict() for p in results[offset: offset + limit]]


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, products: ProductLookup = Depends(get_products)):
    product = products.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.to_dict()


@router.post("/", response_model=ProductOut, status_code=201, dependencies=[Depends(require_admin)])
def create_product(payload: ProductCreate, db: FileBackedDB = Depends(get_db)):
    """
    Create a new product (admin only).
    """
    data = payload.model_dump()
    data["created_at"] = datetime.utcnow().isoformat(sep=" ")
    saved = db.create_record("products", data, id_field="id")
    return Product.from_dict(saved).to_dict()


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(require_admin)])
def update_product(product_id: str, payload: ProductUpdate, db: FileBackedDB = Depends(get_db)):
    """
    Change some fields of a product (admin only). Orders already placed keep
    the price they were charged.
    """
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        row = db.get_record("products", "id", product_id)
    else:
        row = db.update_record("products", "id", product_id, updates)
    if not row:
        raise HTTPException(status_code=404, detail="Product not found")
    return Product.from_dict(row).to_dict()


@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete_product(product_id: str, db: FileBackedDB = Depends(get_db)):
    # carts may still reference it; those lines show a null product from now on
    if not db.delete_record("products", "id", product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted successfully"}
