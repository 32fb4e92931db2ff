"""
Unit tests for the inventory store and the datastore transaction scope.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from pos_admin.core.errors import Conflict, NotFound
from pos_admin.models.categories import Category
from pos_admin.models.products import Product


class TestInventoryStore:

    def test_create_and_get(self, inventory, datastore):
        with datastore.transaction() as db:
            category = Category(name="Books")
            db.add(category)
            db.flush()
            category_id = category.id

        product = inventory.create({
            "name": "Programming Book",
            "price": Decimal("39.99"),
            "stock": 30,
            "sku": "BOOK001",
            "category_id": category_id,
        })

        fetched = inventory.get(product.id)
        assert fetched.name == "Programming Book"
        assert fetched.price == Decimal("39.99")
        assert fetched.stock == 30
        assert fetched.category_name == "Books"

    def test_get_missing_returns_none(self, inventory):
        assert inventory.get(12345) is None

    def test_duplicate_sku_conflicts(self, make_product):
        make_product(sku="SKU-1")

        with pytest.raises(Conflict):
            make_product(sku="SKU-1")

    def test_unknown_category_not_found(self, make_product):
        with pytest.raises(NotFound):
            make_product(category_id=999)

    def test_update_partial(self, inventory, make_product):
        product = make_product(name="Jeans", price="49.99", stock=75)

        updated = inventory.update(product.id, {"stock": 70})

        assert updated.stock == 70
        assert updated.name == "Jeans"
        assert updated.price == Decimal("49.99")

    def test_update_missing(self, inventory):
        with pytest.raises(NotFound):
            inventory.update(999, {"stock": 1})

    def test_delete(self, inventory, make_product):
        product = make_product()

        inventory.delete(product.id)

        assert inventory.get(product.id) is None

    def test_delete_with_sales_history_conflicts(self, inventory, poster, make_product, staff_user):
        product = make_product(stock=5)
        poster.post(staff_user.id, [(product.id, 1)])

        with pytest.raises(Conflict):
            inventory.delete(product.id)

        assert inventory.get(product.id).stock == 4

    def test_list_filters(self, inventory, make_product, datastore):
        make_product(name="Coffee", stock=200, sku="COFFEE001")
        make_product(name="Energy Drink", stock=3)
        make_product(name="Garden Tools", stock=8)

        with datastore.session() as db:
            names = [p.name for p in inventory.list(db)]
            low = [p.name for p in inventory.list(db, low_stock=10)]
            found = [p.name for p in inventory.list(db, search="coffee")]

        assert names == ["Coffee", "Energy Drink", "Garden Tools"]
        assert low == ["Energy Drink", "Garden Tools"]
        assert found == ["Coffee"]


class TestDecrementStock:

    def test_decrement_applies_when_enough(self, inventory, datastore, make_product):
        product = make_product(stock=5)

        with datastore.transaction() as db:
            assert inventory.decrement_stock(db, product.id, 5) is True

        assert inventory.get(product.id).stock == 0

    def test_decrement_refuses_to_go_negative(self, inventory, datastore, make_product):
        product = make_product(stock=5)

        with datastore.transaction() as db:
            assert inventory.decrement_stock(db, product.id, 6) is False

        assert inventory.get(product.id).stock == 5

    def test_decrement_unknown_product(self, inventory, datastore):
        with datastore.transaction() as db:
            assert inventory.decrement_stock(db, 404, 1) is False


class TestTransactionScope:

    def test_rollback_on_exception(self, datastore, inventory, make_product):
        product = make_product(stock=5)

        with pytest.raises(RuntimeError):
            with datastore.transaction() as db:
                inventory.decrement_stock(db, product.id, 2)
                raise RuntimeError("boom")

        assert inventory.get(product.id).stock == 5

    def test_lock_released_after_failure(self, datastore):
        with pytest.raises(RuntimeError):
            with datastore.transaction():
                raise RuntimeError("boom")

        # A second writer can still get in
        with datastore.transaction() as db:
            db.add(Category(name="After failure"))

        with datastore.session() as db:
            assert db.query(Category).filter_by(name="After failure").count() == 1

    def test_negative_stock_rejected_by_database(self, datastore):
        with pytest.raises(IntegrityError):
            with datastore.transaction() as db:
                db.add(Product(name="Broken", price=Decimal("1.00"), stock=-1))
