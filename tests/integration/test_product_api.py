"""Integration tests for Product API endpoints via TestClient."""

NEW_PRODUCT = {
    "name": "Printed Lawn Suit",
    "brand": "Khaadi",
    "price": 4500.0,
    "discount_price": 3999.0,
    "stock_quantity": 20,
    "sizes": ["S", "M", "L"],
    "images": ["https://cdn.example.com/suit.jpg"],
}


def _create(client, admin_headers, **overrides):
    response = client.post("/products", json={**NEW_PRODUCT, **overrides}, headers=admin_headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestPublicCatalogue:
    def test_list_active_products(self, client, admin_headers):
        _create(client, admin_headers)
        hidden = _create(client, admin_headers, name="Hidden")
        client.put(f"/products/{hidden['id']}/deactivate", headers=admin_headers)

        response = client.get("/products")

        assert response.status_code == 200
        body = response.json()
        assert [product["name"] for product in body["data"]] == ["Printed Lawn Suit"]
        assert body["pagination"]["total_items"] == 1

    def test_get_product(self, client, admin_headers):
        created = _create(client, admin_headers)

        response = client.get(f"/products/{created['id']}")

        data = response.json()["data"]
        assert data["effective_price"] == 3999.0
        assert data["is_on_sale"] is True
        assert data["discount_percentage"] == 11
        assert data["sizes"] == ["S", "M", "L"]

    def test_featured_products(self, client, admin_headers):
        _create(client, admin_headers)
        _create(client, admin_headers, name="Eid Collection Kurta", is_featured=True)

        response = client.get("/products/featured")

        assert response.status_code == 200
        assert [product["name"] for product in response.json()["data"]] == ["Eid Collection Kurta"]

    def test_filters_and_sort(self, client, admin_headers):
        category = client.post("/categories", json={"name": "Kurtas"}, headers=admin_headers).json()["data"]
        _create(client, admin_headers, name="Cheap Kurta", price=900.0, discount_price=None, category_id=category["id"], sizes=["L"])
        _create(client, admin_headers, name="Fine Kurta", price=5000.0, discount_price=None, category_id=category["id"], sizes=["XL"])
        _create(client, admin_headers)

        response = client.get("/products", params={"category": category["id"], "sort": "-price"})
        assert [product["name"] for product in response.json()["data"]] == ["Fine Kurta", "Cheap Kurta"]

        response = client.get("/products", params={"size": "L", "max_price": 1000})
        assert [product["name"] for product in response.json()["data"]] == ["Cheap Kurta"]

    def test_invalid_sort_returns_400(self, client):
        response = client.get("/products", params={"sort": "stock_quantity"})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "sort"

    def test_unknown_product_returns_404(self, client):
        response = client.get("/products/missing")
        assert response.status_code == 404


class TestAdminCatalogue:
    def test_customer_cannot_create(self, client, customer_headers):
        response = client.post("/products", json=NEW_PRODUCT, headers=customer_headers)
        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"

    def test_invalid_discount_returns_400(self, client, admin_headers):
        response = client.post("/products", json={**NEW_PRODUCT, "discount_price": 5000.0}, headers=admin_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "ValidationFailed"
        assert body["errors"][0]["field"] == "discount_price"

    def test_update_details_and_pricing(self, client, admin_headers):
        created = _create(client, admin_headers)

        client.put(f"/products/{created['id']}", json={"name": "Renamed Suit"}, headers=admin_headers)
        response = client.put(
            f"/products/{created['id']}/pricing",
            json={"price": 4000.0, "discount_price": None},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["name"] == "Renamed Suit"
        assert data["price"] == 4000.0
        assert data["is_on_sale"] is False

    def test_adjust_stock(self, client, admin_headers):
        created = _create(client, admin_headers)

        response = client.put(
            f"/products/{created['id']}/stock",
            json={"quantity_change": -5, "reason": "Damaged in transit"},
            headers=admin_headers,
        )

        assert response.json()["data"]["stock_quantity"] == 15

    def test_delete(self, client, admin_headers):
        created = _create(client, admin_headers)

        response = client.delete(f"/products/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f"/products/{created['id']}").status_code == 404
