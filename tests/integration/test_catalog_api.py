"""
Integration tests for product and category CRUD.
"""

from decimal import Decimal


def create_category(client, headers, name="Electronics"):
    response = client.post(
        "/api/categories",
        json={"name": name, "description": f"{name} items"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCategories:

    def test_crud(self, client, auth_headers):
        clothing = create_category(client, auth_headers, "Clothing")
        create_category(client, auth_headers, "Books")

        listing = client.get("/api/categories", headers=auth_headers)
        assert [c["name"] for c in listing.json()] == ["Books", "Clothing"]

        updated = client.put(
            f"/api/categories/{clothing['id']}",
            json={"name": "Apparel"},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["name"] == "Apparel"
        assert updated.json()["description"] is None

        deleted = client.delete(f"/api/categories/{clothing['id']}", headers=auth_headers)
        assert deleted.status_code == 200

        listing = client.get("/api/categories", headers=auth_headers)
        assert [c["name"] for c in listing.json()] == ["Books"]

    def test_delete_detaches_products(self, client, auth_headers):
        category = create_category(client, auth_headers)
        product = client.post(
            "/api/products",
            json={"name": "Smartphone", "price": "299.99", "stock": 5, "category_id": category["id"]},
            headers=auth_headers,
        ).json()

        client.delete(f"/api/categories/{category['id']}", headers=auth_headers)

        fetched = client.get(f"/api/products/{product['id']}", headers=auth_headers).json()
        assert fetched["category_id"] is None
        assert fetched["category_name"] is None

    def test_update_missing(self, client, auth_headers):
        response = client.put("/api/categories/55", json={"name": "X"}, headers=auth_headers)

        assert response.status_code == 404


class TestProducts:

    def test_create_and_fetch(self, client, auth_headers):
        category = create_category(client, auth_headers)

        response = client.post(
            "/api/products",
            json={
                "name": "Laptop",
                "description": "High-performance laptop",
                "price": "899.99",
                "stock": 25,
                "category_id": category["id"],
                "sku": "LAPTOP001",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        product = response.json()
        assert Decimal(product["price"]) == Decimal("899.99")
        assert product["category_name"] == "Electronics"

        fetched = client.get(f"/api/products/{product['id']}", headers=auth_headers)
        assert fetched.status_code == 200
        assert fetched.json()["sku"] == "LAPTOP001"

    def test_negative_values_rejected(self, client, auth_headers):
        negative_price = client.post(
            "/api/products",
            json={"name": "Bad", "price": "-1", "stock": 1},
            headers=auth_headers,
        )
        negative_stock = client.post(
            "/api/products",
            json={"name": "Bad", "price": "1", "stock": -1},
            headers=auth_headers,
        )

        assert negative_price.status_code == 422
        assert negative_stock.status_code == 422

    def test_duplicate_sku(self, client, auth_headers):
        payload = {"name": "Coffee", "price": "12.99", "stock": 1, "sku": "COFFEE001"}
        client.post("/api/products", json=payload, headers=auth_headers)

        response = client.post("/api/products", json=payload, headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_partial_update(self, client, auth_headers, make_product):
        product = make_product(name="Jeans", price="49.99", stock=75)

        response = client.put(
            f"/api/products/{product.id}",
            json={"price": "44.99"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["price"]) == Decimal("44.99")
        assert body["stock"] == 75
        assert body["name"] == "Jeans"

    def test_update_rejects_null_required_field(self, client, auth_headers, make_product):
        product = make_product(name="Jeans", price="49.99", stock=75)

        response = client.put(
            f"/api/products/{product.id}",
            json={"stock": None, "price": "39.99"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"
        assert "stock" in response.json()["message"]

        fetched = client.get(f"/api/products/{product.id}", headers=auth_headers).json()
        assert fetched["stock"] == 75
        assert Decimal(fetched["price"]) == Decimal("49.99")

    def test_list_filters(self, client, auth_headers, make_product):
        make_product(name="Coffee", stock=200)
        make_product(name="Energy Drink", stock=2)

        everything = client.get("/api/products", headers=auth_headers).json()
        low = client.get("/api/products", params={"low_stock": "true"}, headers=auth_headers).json()
        search = client.get("/api/products", params={"search": "energy"}, headers=auth_headers).json()

        assert [p["name"] for p in everything] == ["Coffee", "Energy Drink"]
        assert [p["name"] for p in low] == ["Energy Drink"]
        assert [p["name"] for p in search] == ["Energy Drink"]

    def test_delete(self, client, auth_headers, make_product):
        product = make_product()

        response = client.delete(f"/api/products/{product.id}", headers=auth_headers)
        assert response.status_code == 200

        missing = client.get(f"/api/products/{product.id}", headers=auth_headers)
        assert missing.status_code == 404

    def test_delete_sold_product_conflicts(self, client, auth_headers, make_product, poster, staff_user):
        product = make_product(stock=3)
        poster.post(staff_user.id, [(product.id, 1)])

        response = client.delete(f"/api/products/{product.id}", headers=auth_headers)

        assert response.status_code == 409
