"""
Seed the catalog with sample products and make sure an admin account exists.

Run with: python seed.py
Admin credentials come from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME.
"""

import logging
import os
from typing import Any, Dict, List

from database import create_document, get_db, now
from schemas import Product as ProductSchema, User as UserSchema
from security import hash_password

logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@ecommerce.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123456")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin User")

SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "iPhone 15 Pro",
        "description": "Titanium design, A17 Pro chip and a 48MP main camera.",
        "price": 999,
        "discount_price": 899,
        "category": "Electronics",
        "brand": "Apple",
        "images": [{"url": "https://images.unsplash.com/photo-1592286942460-c63600a6b253?w=400", "alt": "iPhone 15 Pro"}],
        "stock": 50,
        "specifications": {"Screen Size": "6.1 inches", "Storage": "128GB", "Color": "Natural Titanium"},
        "rating": {"average": 4.8, "count": 245},
        "tags": ["smartphone", "apple", "premium", "5g"],
    },
    {
        "name": "MacBook Air M2",
        "description": "Supercharged by the M2 chip. Ultra-thin and available in four colors.",
        "price": 1199,
        "category": "Electronics",
        "brand": "Apple",
        "images": [{"url": "https://images.unsplash.com/photo-1517336714731-489689fd1ca8?w=400", "alt": "MacBook Air M2"}],
        "stock": 30,
        "specifications": {"Processor": "Apple M2 chip", "Memory": "8GB", "Storage": "256GB SSD"},
        "rating": {"average": 4.7, "count": 189},
        "tags": ["laptop", "apple", "ultrabook"],
    },
    {
        "name": "Sony WH-1000XM5",
        "description": "Noise canceling wireless headphones with long battery life.",
        "price": 399,
        "discount_price": 329,
        "category": "Electronics",
        "brand": "Sony",
        "images": [{"url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400", "alt": "Sony WH-1000XM5"}],
        "stock": 75,
        "rating": {"average": 4.6, "count": 423},
        "tags": ["headphones", "wireless", "noise-canceling"],
    },
    {
        "name": "Nike Air Max 270",
        "description": "Lifestyle shoe with a Max Air unit for all-day comfort.",
        "price": 150,
        "discount_price": 120,
        "category": "Clothing",
        "brand": "Nike",
        "images": [{"url": "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=400", "alt": "Nike Air Max 270"}],
        "stock": 100,
        "rating": {"average": 4.4, "count": 567},
        "tags": ["shoes", "sneakers", "running"],
    },
    {
        "name": "The Pragmatic Programmer",
        "description": "Classic guide to software craftsmanship, 20th anniversary edition.",
        "price": 49.99,
        "category": "Books",
        "brand": "Addison-Wesley",
        "stock": 8,
        "rating": {"average": 4.9, "count": 1024},
        "tags": ["programming", "software"],
    },
    {
        "name": "Yoga Mat Pro",
        "description": "Non-slip 6mm mat with carrying strap.",
        "price": 35,
        "category": "Sports",
        "brand": "Gaiam",
        "stock": 0,
        "rating": {"average": 3.9, "count": 88},
        "tags": ["yoga", "fitness"],
    },
]


def seed_products(products: List[Dict[str, Any]] = SAMPLE_PRODUCTS) -> int:
    """Insert the sample catalog when the product collection is empty."""
    if get_db()["product"].count_documents({}) > 0:
        logger.info("Products already present, skipping seed")
        return 0
    for data in products:
        create_document("product", ProductSchema(**data))
    logger.info("Seeded %d products", len(products))
    return len(products)


def ensure_admin(email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD, name: str = ADMIN_NAME) -> Dict[str, Any]:
    """Create the admin account, or promote the existing user with that email."""
    users = get_db()["user"]
    email = email.lower()
    existing = users.find_one({"email": email})
    if existing:
        if existing.get("role") != "admin":
            users.update_one({"_id": existing["_id"]}, {"$set": {"role": "admin", "updated_at": now()}})
            logger.info("Promoted %s to admin", email)
        return users.find_one({"_id": existing["_id"]})
    doc = UserSchema(name=name, email=email, password_hash=hash_password(password), role="admin")
    create_document("user", doc)
    logger.info("Created admin user %s", email)
    return users.find_one({"email": email})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    seed_products()
    ensure_admin()
