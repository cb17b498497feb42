"""Creates the data directory and seeds the products table with a small sample catalog."""
from datetime import datetime

from storefront.database import db

SAMPLE_PRODUCTS = [
    {"name": "Cotton T-Shirt", "price": 499.0, "discount": 0, "category": "clothing"},
    {"name": "Denim Jacket", "price": 1999.0, "discount": 10, "category": "clothing"},
    {"name": "Running Shoes", "price": 2499.0, "discount": 5, "category": "footwear"},
    {"name": "Steel Water Bottle", "price": 349.0, "discount": 0, "category": "accessories"},
]


db.data_dir.mkdir(parents=True, exist_ok=True)

if db.list_records("products"):
    print("products table already has rows, nothing to do")
else:
    for p in SAMPLE_PRODUCTS:
        row = db.create_record("products", {**p, "created_at": datetime.utcnow().isoformat(sep=" ")})
        print(f"Created product {row['id']}: {row['name']}")
