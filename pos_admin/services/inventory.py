# pos_admin/services/inventory.py
#
# Product records and their quantity on hand. Every mutation runs
# inside a Datastore write transaction, serialized with sale postings.

import logging

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from pos_admin.core.errors import Conflict, NotFound
from pos_admin.database import Datastore
from pos_admin.models.categories import Category
from pos_admin.models.products import Product
from pos_admin.models.sale_items import SaleItem

logger = logging.getLogger("app")


class InventoryStore:

    def __init__(self, datastore: Datastore):
        self.datastore = datastore

    # ---------------- READ ----------------

    def get(self, product_id: int, db: Session | None = None) -> Product | None:
        if db is not None:
            return db.get(Product, product_id)

        with self.datastore.session() as session:
            return (
                session.query(Product)
                .options(joinedload(Product.category))
                .filter(Product.id == product_id)
                .first()
            )

    def list(
        self,
        db: Session,
        search: str | None = None,
        category_id: int | None = None,
        low_stock: int | None = None,
    ) -> list[Product]:
        query = db.query(Product).options(joinedload(Product.category))

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))

        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        if low_stock is not None:
            query = query.filter(Product.stock < low_stock)

        return query.order_by(Product.name, Product.id).all()

    # ---------------- STOCK ----------------

    def decrement_stock(self, db: Session, product_id: int, amount: int) -> bool:
        """
        Conditionally take ``amount`` units off a product's stock.

        Returns False, touching nothing, when the product is gone or holds
        fewer than ``amount`` units. Must be called inside a write transaction.
        """
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= amount)
            .values(stock=Product.stock - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ---------------- CRUD ----------------

    def create(self, data: dict) -> Product:
        with self.datastore.transaction() as db:
            self._check_category(db, data.get("category_id"))
            self._check_sku(db, data.get("sku"))

            product = Product(**data)
            db.add(product)
            self._flush(db)
            db.refresh(product)
            product.category  # load before the session closes

        logger.info(f"Product created id={product.id} name={product.name!r} stock={product.stock}")
        return product

    def update(self, product_id: int, data: dict) -> Product:
        with self.datastore.transaction() as db:
            product = db.get(Product, product_id)

            if not product:
                raise NotFound("Product not found")

            if "category_id" in data:
                self._check_category(db, data["category_id"])

            if data.get("sku") is not None and data["sku"] != product.sku:
                self._check_sku(db, data["sku"])

            for field, value in data.items():
                setattr(product, field, value)

            self._flush(db)
            db.refresh(product)
            product.category

        logger.info(f"Product updated id={product.id} fields={sorted(data)}")
        return product

    def delete(self, product_id: int) -> None:
        with self.datastore.transaction() as db:
            product = db.get(Product, product_id)

            if not product:
                raise NotFound("Product not found")

            has_history = (
                db.query(SaleItem.id)
                .filter(SaleItem.product_id == product_id)
                .first()
            )
            if has_history:
                raise Conflict("Product has sales history and cannot be deleted")

            db.delete(product)

        logger.info(f"Product deleted id={product_id}")

    # ---------------- HELPERS ----------------

    @staticmethod
    def _check_category(db: Session, category_id: int | None):
        if category_id is not None and db.get(Category, category_id) is None:
            raise NotFound("Category not found")

    @staticmethod
    def _check_sku(db: Session, sku: str | None):
        if sku is None:
            return

        if db.query(Product.id).filter(Product.sku == sku).first():
            raise Conflict("Product with this SKU already exists")

    @staticmethod
    def _flush(db: Session):
        try:
            db.flush()
        except IntegrityError as e:
            logger.warning(f"Product constraint violated: {e.orig}")
            raise Conflict("Product violates a uniqueness or integrity constraint")
