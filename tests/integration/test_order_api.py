"""Integration tests for Order API endpoints via TestClient."""

import pytest
from protean import current_domain

from storefront.catalogue.product import Product

ADDRESS = {
    "full_name": "Ayesha Khan",
    "street": "12 Mall Road",
    "city": "Lahore",
    "province": "Punjab",
    "postal_code": "54000",
    "phone": "03001234567",
}


@pytest.fixture()
def product(make_product):
    return make_product(name="Lawn Kurta", price=1000.0, stock_quantity=10, sizes=["M"])


def _add_to_cart(client, headers, product, quantity=2, size="M"):
    response = client.post(
        "/cart/items",
        json={"product_id": str(product.id), "quantity": quantity, "size": size},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


def _place_order(client, headers, **overrides):
    body = {"shipping_address": ADDRESS, "payment_method": "COD"}
    body.update(overrides)
    return client.post("/orders", json=body, headers=headers)


def _placed_order(client, headers, product):
    _add_to_cart(client, headers, product)
    response = _place_order(client, headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestPlaceOrderAPI:
    def test_place_returns_201_with_order(self, client, customer_headers, product):
        _add_to_cart(client, customer_headers, product)

        response = _place_order(client, customer_headers, notes="Call first")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Order placed successfully"
        order = body["data"]
        assert order["order_number"].startswith("SK-")
        assert order["subtotal"] == 2000.0
        assert order["shipping_cost"] == 200.0
        assert order["total"] == 2200.0
        assert order["order_status"] == "Pending"
        assert order["items"][0]["size"] == "M"
        assert order["status_history"][0]["note"] == "Order placed"
        assert order["notes"] == "Call first"

    def test_cart_is_empty_after_placement(self, client, customer_headers, product):
        _placed_order(client, customer_headers, product)

        response = client.get("/cart", headers=customer_headers)

        assert response.json()["data"]["items"] == []

    def test_empty_cart_returns_400(self, client, customer_headers):
        response = _place_order(client, customer_headers)

        assert response.status_code == 400
        body = response.json()
        assert body == {"success": False, "kind": "EmptyCart", "message": "Cart is empty", "errors": []}

    def test_insufficient_stock_returns_400(self, client, customer_headers, product):
        _add_to_cart(client, customer_headers, product, quantity=2)
        repo = current_domain.repository_for(Product)
        stored = repo.get(product.id)
        stored.adjust_stock(-9)
        repo.add(stored)

        response = _place_order(client, customer_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "InsufficientStock"
        assert "Lawn Kurta" in body["message"]

    def test_invalid_phone_returns_400(self, client, customer_headers, product):
        _add_to_cart(client, customer_headers, product)

        response = _place_order(client, customer_headers, shipping_address={**ADDRESS, "phone": "123"})

        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "ValidationFailed"
        assert body["errors"][0]["field"] == "phone"

    def test_missing_address_field_returns_400(self, client, customer_headers):
        address = {k: v for k, v in ADDRESS.items() if k != "city"}

        response = _place_order(client, customer_headers, shipping_address=address)

        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationFailed"

    def test_requires_token(self, client):
        response = _place_order(client, {})
        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"


class TestViewOrdersAPI:
    def test_list_own_orders(self, client, customer_headers, other_customer_headers, product):
        _placed_order(client, customer_headers, product)
        _placed_order(client, other_customer_headers, product)

        response = client.get("/orders", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 1
        assert body["pagination"]["total_items"] == 1
        assert body["pagination"]["current_page"] == 1

    def test_owner_can_view_by_number(self, client, customer_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.get(f"/orders/{order['order_number']}", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == order["id"]

    def test_other_customer_gets_403(self, client, customer_headers, other_customer_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.get(f"/orders/{order['order_number']}", headers=other_customer_headers)

        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"

    def test_admin_can_view_any_order(self, client, customer_headers, admin_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.get(f"/orders/{order['order_number']}", headers=admin_headers)

        assert response.status_code == 200

    def test_unknown_order_number_returns_404(self, client, customer_headers):
        response = client.get("/orders/SK-NOPE-0000", headers=customer_headers)
        assert response.status_code == 404
        assert response.json()["kind"] == "NotFound"


class TestCancelOrderAPI:
    def test_cancel_restores_stock(self, client, customer_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.put(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["order_status"] == "Cancelled"
        assert current_domain.repository_for(Product).get(product.id).stock_quantity == 10

    def test_cancel_shipped_returns_400(self, client, customer_headers, admin_headers, product):
        order = _placed_order(client, customer_headers, product)
        client.put(f"/orders/admin/{order['id']}/status", json={"order_status": "Shipped"}, headers=admin_headers)

        response = client.put(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidTransition"

    def test_cancel_someone_elses_order_returns_403(self, client, customer_headers, other_customer_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.put(f"/orders/{order['id']}/cancel", headers=other_customer_headers)

        assert response.status_code == 403


class TestAdminOrdersAPI:
    def test_customer_cannot_use_admin_routes(self, client, customer_headers):
        assert client.get("/orders/admin/all", headers=customer_headers).status_code == 403
        assert client.get("/orders/admin/stats", headers=customer_headers).status_code == 403

    def test_list_all_with_status_filter(self, client, customer_headers, other_customer_headers, admin_headers, product):
        first = _placed_order(client, customer_headers, product)
        _placed_order(client, other_customer_headers, product)
        client.put(f"/orders/admin/{first['id']}/status", json={"order_status": "Confirmed"}, headers=admin_headers)

        response = client.get("/orders/admin/all", params={"status": "Confirmed"}, headers=admin_headers)

        assert response.status_code == 200
        assert [order["id"] for order in response.json()["data"]] == [first["id"]]

    def test_update_status(self, client, customer_headers, admin_headers, product):
        order = _placed_order(client, customer_headers, product)

        response = client.put(
            f"/orders/admin/{order['id']}/status",
            json={"order_status": "Shipped", "note": "Dispatched", "tracking_number": "LEO-991"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["order_status"] == "Shipped"
        assert data["tracking_number"] == "LEO-991"

    def test_illegal_status_returns_400(self, client, customer_headers, admin_headers, product):
        order = _placed_order(client, customer_headers, product)
        client.put(f"/orders/admin/{order['id']}/status", json={"order_status": "Cancelled"}, headers=admin_headers)

        response = client.put(
            f"/orders/admin/{order['id']}/status", json={"order_status": "Confirmed"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidTransition"

    def test_stats(self, client, customer_headers, admin_headers, product):
        _placed_order(client, customer_headers, product)

        response = client.get("/orders/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["by_status"] == [{"status": "Pending", "count": 1, "total_revenue": 2200.0}]
        assert data["today"]["orders"] == 1
