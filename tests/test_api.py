"""End-to-end tests through the HTTP layer."""
import pytest

from conftest import login, seed_product, seed_user, stock_of
from market.models.user import Role

API = "/api/v1"


@pytest.fixture
def customer(client):
    seed_user()
    return login(client)


@pytest.fixture
def admin(client):
    seed_user(email="admin@example.com", password="adminpass", username="admin", role=Role.admin)
    return login(client, "admin@example.com", "adminpass")


class TestAuth:
    def test_register_and_login(self, client):
        response = client.post(
            f"{API}/register",
            json={"email": "new@example.com", "password": "secret123", "username": "new"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["role"] == "customer"

        assert login(client, "new@example.com", "secret123")

    def test_register_duplicate_email(self, client):
        seed_user()
        response = client.post(
            f"{API}/register",
            json={"email": "alice@example.com", "password": "secret123", "username": "again"},
        )
        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "email already registered"}

    def test_register_short_password(self, client):
        response = client.post(
            f"{API}/register",
            json={"email": "new@example.com", "password": "123", "username": "new"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"].startswith("password")

    def test_login_bad_password(self, client):
        seed_user()
        response = client.post(f"{API}/login", json={"email": "alice@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["success"] is False


class TestAccessControl:
    def test_cart_requires_token(self, client):
        response = client.get(f"{API}/user/cart")
        assert response.status_code == 401
        assert response.json()["error"] == "missing authorization header"

    def test_garbage_token(self, client):
        response = client.get(f"{API}/user/cart", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_customer_cannot_use_admin_routes(self, client, customer):
        response = client.get(f"{API}/admin/orders", headers=customer)
        assert response.status_code == 403
        assert response.json() == {"success": False, "error": "admin access required"}

    def test_categories_are_public(self, client, admin):
        client.post(f"{API}/admin/category", json={"name": "Books"}, headers=admin)
        response = client.get(f"{API}/categories")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Books"]

    def test_percent_search_does_not_match_everything(self, client):
        seed_product(name="Lamp")
        assert client.get(f"{API}/product/%25").status_code == 404

    def test_catalog_is_public(self, client):
        seed_product(name="Lamp")
        response = client.get(f"{API}/products")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()["data"]] == ["Lamp"]


class TestShoppingFlow:
    def test_cart_checkout_and_cancel(self, client, customer, admin):
        lamp = seed_product(name="Lamp", price=10.0, stock=5)
        mug = seed_product(name="Mug", price=5.0, stock=5)

        assert client.post(f"{API}/user/cart/item/{lamp}?quantity=2", headers=customer).status_code == 200
        response = client.post(f"{API}/user/cart/item/{mug}", headers=customer)
        assert response.json()["data"]["quantity"] == 1
        assert stock_of(lamp) == 3

        cart = client.get(f"{API}/user/cart", headers=customer).json()
        assert cart["total"] == 25.0
        assert [line["quantity"] for line in cart["data"]] == [2, 1]

        response = client.post(
            f"{API}/user/cart/checkout",
            json={"shipping_address": "1 Main St", "payment_method": "cod"},
            headers=customer,
        )
        assert response.status_code == 200
        order = response.json()["data"]
        assert order["status"] == "pending"
        assert order["total_amount"] == 25.0
        assert client.get(f"{API}/user/cart", headers=customer).json()["data"] == []

        orders = client.get(f"{API}/user/orders", headers=customer).json()["data"]
        assert [o["id"] for o in orders] == [order["id"]]
        assert len(client.get(f"{API}/admin/orders", headers=admin).json()["data"]) == 1

        response = client.delete(f"{API}/user/order/cancel/{order['id']}", headers=customer)
        assert response.json() == {"success": True, "message": "Order canceled successfully"}
        assert stock_of(lamp) == 5
        assert stock_of(mug) == 5

        response = client.delete(f"{API}/user/order/cancel/{order['id']}", headers=customer)
        assert response.status_code == 409

    def test_out_of_stock(self, client, customer):
        product = seed_product(stock=1)
        client.post(f"{API}/user/cart/item/{product}", headers=customer)

        response = client.post(f"{API}/user/cart/item/{product}", headers=customer)

        assert response.status_code == 409
        assert response.json()["success"] is False
        assert stock_of(product) == 0

    def test_oversized_quantity_is_a_bad_request(self, client, customer):
        product = seed_product(stock=5)

        response = client.post(f"{API}/user/cart/item/{product}?quantity={10**20}", headers=customer)

        assert response.status_code == 400
        assert response.json()["error"].startswith("quantity")
        assert stock_of(product) == 5

    def test_decrement_then_remove(self, client, customer):
        product = seed_product(stock=5)
        client.post(f"{API}/user/cart/item/{product}?quantity=2", headers=customer)

        response = client.delete(f"{API}/user/cart/{product}", headers=customer)
        assert response.json()["message"] == "Product quantity decreased successfully"
        assert response.json()["data"]["quantity"] == 1

        response = client.delete(f"{API}/user/cart/{product}", headers=customer)
        assert response.json() == {"success": True, "message": "Product removed from cart successfully"}
        assert stock_of(product) == 5

        response = client.delete(f"{API}/user/cart/{product}", headers=customer)
        assert response.status_code == 404

    def test_clear_cart(self, client, customer):
        product = seed_product(stock=5)
        client.post(f"{API}/user/cart/item/{product}?quantity=3", headers=customer)

        response = client.delete(f"{API}/user/cart/cancel", headers=customer)

        assert response.status_code == 200
        assert stock_of(product) == 5
        assert client.delete(f"{API}/user/cart/cancel", headers=customer).status_code == 200

    def test_checkout_empty_cart(self, client, customer):
        response = client.post(f"{API}/user/cart/checkout", headers=customer)
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "cart is empty"}


class TestAdminOrders:
    def _order(self, client, customer):
        product = seed_product(stock=5)
        client.post(f"{API}/user/cart/item/{product}", headers=customer)
        order = client.post(f"{API}/user/cart/checkout", headers=customer).json()["data"]
        return order["id"], product

    def test_status_update_reports_old_and_new(self, client, customer, admin):
        order_id, _ = self._order(client, customer)

        response = client.put(f"{API}/admin/order/status/{order_id}/confirmed", headers=admin)

        body = response.json()
        assert response.status_code == 200
        assert body["old_status"] == "pending"
        assert body["new_status"] == "confirmed"
        assert body["data"]["status"] == "confirmed"

    def test_legacy_cancel_code(self, client, customer, admin):
        order_id, product = self._order(client, customer)

        response = client.put(f"{API}/admin/order/status/{order_id}/3", headers=admin)

        assert response.json()["new_status"] == "cancelled"
        assert stock_of(product) == 5

    def test_invalid_transition(self, client, customer, admin):
        order_id, _ = self._order(client, customer)

        response = client.put(f"{API}/admin/order/status/{order_id}/delivered", headers=admin)

        assert response.status_code == 409
        assert "cannot change from 'pending' to 'delivered'" in response.json()["error"]

    def test_unknown_status(self, client, customer, admin):
        order_id, _ = self._order(client, customer)
        response = client.put(f"{API}/admin/order/status/{order_id}/lost", headers=admin)
        assert response.status_code == 400

    def test_unknown_order(self, client, admin):
        response = client.put(f"{API}/admin/order/status/999/confirmed", headers=admin)
        assert response.status_code == 404


class TestAdminCatalog:
    def test_product_lifecycle(self, client, admin):
        response = client.post(f"{API}/admin/product", json={"name": "Desk", "price": 120.0, "stock": 2}, headers=admin)
        assert response.status_code == 201
        product_id = response.json()["data"]["id"]

        response = client.put(f"{API}/admin/product/{product_id}", json={"restock": 3}, headers=admin)
        assert response.json()["data"]["stock"] == 5

        assert client.delete(f"{API}/admin/product/{product_id}", headers=admin).status_code == 200
        assert client.get(f"{API}/product/desk").status_code == 404

    def test_negative_price_is_rejected(self, client, admin):
        response = client.post(f"{API}/admin/product", json={"name": "Desk", "price": -1}, headers=admin)
        assert response.status_code == 400
        assert response.json()["error"].startswith("price")
