# pos_admin/seed.py
# Demo data for an empty database

import logging
from decimal import Decimal

from pos_admin.core.config import settings
from pos_admin.core.hashing import hash_password
from pos_admin.database import Datastore
from pos_admin.models.categories import Category
from pos_admin.models.products import Product
from pos_admin.models.sales import Sale
from pos_admin.models.users import User, ROLE_ADMIN
from pos_admin.services.sale_poster import SalePoster

logger = logging.getLogger("app")

CATEGORIES = [
    ("Electronics", "Electronic devices and accessories"),
    ("Clothing", "Apparel and fashion items"),
    ("Food & Beverages", "Food items and drinks"),
    ("Books", "Books and educational materials"),
    ("Home & Garden", "Home improvement and garden supplies"),
]

# name, description, price, stock, category name, sku
PRODUCTS = [
    ("Smartphone", "Latest Android smartphone", "299.99", 50, "Electronics", "PHONE001"),
    ("Laptop", "High-performance laptop", "899.99", 25, "Electronics", "LAPTOP001"),
    ("T-Shirt", "Cotton t-shirt", "19.99", 100, "Clothing", "SHIRT001"),
    ("Jeans", "Denim jeans", "49.99", 75, "Clothing", "JEANS001"),
    ("Coffee", "Premium coffee beans", "12.99", 200, "Food & Beverages", "COFFEE001"),
    ("Energy Drink", "Energy boost drink", "2.99", 150, "Food & Beverages", "ENERGY001"),
    ("Programming Book", "Learn JavaScript", "39.99", 30, "Books", "BOOK001"),
    ("Garden Tools", "Basic garden tool set", "79.99", 20, "Home & Garden", "TOOLS001"),
]

# lists of (sku, quantity)
SAMPLE_SALES = [
    [("PHONE001", 1), ("COFFEE001", 1)],
    [("SHIRT001", 2), ("JEANS001", 1)],
    [("LAPTOP001", 1)],
    [("BOOK001", 1), ("ENERGY001", 1)],
]


def seed_demo_data(datastore: Datastore):
    with datastore.transaction() as db:
        admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
        if not admin:
            admin = User(
                email=settings.ADMIN_EMAIL,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                name=settings.ADMIN_NAME,
                role=ROLE_ADMIN,
            )
            db.add(admin)
            db.flush()
            logger.info(f"Seeded admin user {settings.ADMIN_EMAIL}")
        admin_id = admin.id

        if not db.query(Category.id).first():
            db.add_all(Category(name=name, description=description) for name, description in CATEGORIES)
            db.flush()
            logger.info(f"Seeded {len(CATEGORIES)} categories")

        if not db.query(Product.id).first():
            category_ids = {c.name: c.id for c in db.query(Category).all()}
            db.add_all(
                Product(
                    name=name,
                    description=description,
                    price=Decimal(price),
                    stock=stock,
                    category_id=category_ids.get(category),
                    sku=sku,
                )
                for name, description, price, stock, category, sku in PRODUCTS
            )
            db.flush()
            logger.info(f"Seeded {len(PRODUCTS)} products")

        has_sales = db.query(Sale.id).first() is not None
        product_ids = {p.sku: p.id for p in db.query(Product).filter(Product.sku.isnot(None))}

    if has_sales:
        return

    poster = SalePoster(datastore)
    for lines in SAMPLE_SALES:
        items = [(product_ids[sku], quantity) for sku, quantity in lines if sku in product_ids]
        if items:
            poster.post(admin_id, items, "cash")

    logger.info(f"Seeded {len(SAMPLE_SALES)} sample sales")
