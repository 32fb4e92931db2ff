"""
Integration tests for application bootstrap: health check and demo seeding.
"""

from decimal import Decimal

from fastapi.testclient import TestClient

from pos_admin.main import create_app
from pos_admin.models.categories import Category
from pos_admin.models.products import Product
from pos_admin.models.sales import Sale
from pos_admin.models.users import User
from pos_admin.seed import seed_demo_data


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"
    assert response.json()["version"] == "1.0.0"


class TestSeeding:

    def test_seeded_database(self, database_url):
        app = create_app(database_url, seed=True)
        datastore = app.state.datastore

        try:
            with datastore.session() as db:
                assert db.query(User).count() == 1
                assert db.query(Category).count() == 5
                assert db.query(Product).count() == 8
                assert db.query(Sale).count() == 4

                phone = db.query(Product).filter_by(sku="PHONE001").one()
                assert phone.stock == 49

                first_sale = db.query(Sale).order_by(Sale.id).first()
                assert first_sale.total_amount == Decimal("312.98")

            client = TestClient(app)
            response = client.post(
                "/api/auth/login",
                json={"email": "admin@pos.com", "password": "admin123"},
            )
            assert response.status_code == 200
            assert response.json()["user"]["role"] == "admin"
        finally:
            datastore.dispose()

    def test_seeding_is_idempotent(self, datastore):
        seed_demo_data(datastore)
        seed_demo_data(datastore)

        with datastore.session() as db:
            assert db.query(User).count() == 1
            assert db.query(Product).count() == 8
            assert db.query(Sale).count() == 4
