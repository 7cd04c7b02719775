import pytest

from storefront.api.routers.orders import get_verifier
from storefront.data.seed import DEMO_PRODUCTS, seed
from storefront.main import app

from conftest import StubVerifier

USER = {"X-User-Id": "1"}
ADMIN = {"X-User-Role": "admin"}
SHIPPING = {"deliveryAddress": "Main St 1", "telephone": "+48123456789", "paymentMethod": "card"}


@pytest.fixture
def shop(make_product, make_user):
    make_user(1)
    make_product("A", {"M": 5, "L": 1}, price=10000, discount=20)
    make_product("B", {"L": 0})


def add(client, article, size, quantity, headers=None):
    return client.post(
        "/cart/items",
        json={"articleNumber": article, "size": size, "quantity": quantity},
        headers=headers or {},
    )


class TestCatalog:
    def test_health(self, client):
        assert client.get("/health").status_code == 200

    def test_seeded_catalog(self, db, client):
        seed(db)

        resp = client.get("/products")

        assert resp.status_code == 200
        assert {p["articleNumber"] for p in resp.json()} == {p["article_number"] for p in DEMO_PRODUCTS}

    def test_inactive_product_is_hidden(self, client, make_product):
        make_product("OLD", {"M": 1}, is_active=False)

        resp = client.get("/products/OLD")

        assert resp.status_code == 404
        assert resp.json()["detail"]["kind"] == "not_found"


class TestUserCart:
    def test_add_and_read(self, client, shop):
        assert add(client, "A", "M", 2, USER).status_code == 201

        cart = client.get("/cart", headers=USER).json()

        assert [(i["articleNumber"], i["quantity"]) for i in cart["items"]] == [("A", 2)]
        assert cart["total"] == 2 * 8000
        assert client.get("/cart/count", headers=USER).json() == {"count": 1}

    def test_out_of_stock_error_body(self, client, shop):
        resp = add(client, "A", "L", 2, USER)

        assert resp.status_code == 400
        assert resp.json()["detail"]["kind"] == "out_of_stock"

    def test_invalid_quantity_is_rejected(self, client, shop):
        assert add(client, "A", "M", 0, USER).status_code == 422

    def test_line_of_another_user(self, client, shop, make_user):
        make_user(2)
        line = add(client, "A", "M", 1, USER).json()

        resp = client.delete(f"/cart/items/{line['id']}", headers={"X-User-Id": "2"})

        assert resp.status_code == 403
        assert resp.json()["detail"]["kind"] == "forbidden"

    def test_line_endpoints_require_user(self, client, shop):
        resp = client.put("/cart/items/1", json={"size": "M", "quantity": 1})

        assert resp.status_code == 401


class TestGuestFlow:
    def test_guest_cart_survives_between_requests(self, client, shop):
        add(client, "A", "M", 2)
        add(client, "A", "M", 1)

        cart = client.get("/cart").json()

        assert cart["orderId"] is None
        assert [(i["articleNumber"], i["size"], i["quantity"]) for i in cart["items"]] == [("A", "M", 3)]

    def test_login_migrates_session(self, client, shop, active_carts):
        add(client, "A", "M", 2)
        client.post("/favorites", json={"articleNumber": "B"})

        resp = client.post("/users/login", headers=USER)

        assert resp.status_code == 200
        [(_, items)] = active_carts(1)
        assert items == [("A", "M", 2)]
        assert client.get("/favorites", headers=USER).json() == {"items": ["B"], "count": 1}
        assert client.get("/cart/count").json() == {"count": 0}

    def test_register_migrates_session(self, client, make_product, active_carts):
        make_product("A", {"M": 5})
        add(client, "A", "M", 1)

        resp = client.post("/users", json={"id": 9, "name": "Nina"})

        assert resp.status_code == 201
        [(_, items)] = active_carts(9)
        assert items == [("A", "M", 1)]

    def test_session_item_endpoints_are_for_guests(self, client, shop):
        resp = client.put(
            "/cart/session-items",
            json={"articleNumber": "A", "size": "M", "quantity": 1},
            headers=USER,
        )

        assert resp.status_code == 403

    def test_session_item_update_and_remove(self, client, shop):
        add(client, "A", "M", 2)

        resp = client.put(
            "/cart/session-items",
            json={"articleNumber": "A", "size": "M", "quantity": 1, "newSize": "L"},
        )
        assert resp.json()["size"] == "L"

        assert client.delete("/cart/session-items/A/L").status_code == 200
        assert client.get("/cart/count").json() == {"count": 0}


class TestCheckout:
    def test_user_checkout(self, client, shop, stock_of):
        add(client, "A", "M", 3, USER)

        resp = client.post("/orders/checkout", json=SHIPPING, headers=USER)

        assert resp.status_code == 200
        order_id = resp.json()["orderId"]
        assert stock_of("A", "M") == 2

        order = client.get(f"/orders/{order_id}", headers=USER).json()
        assert order["status"] == "PLACED"
        assert order["deliveryAddress"] == "Main St 1"
        assert [o["orderId"] for o in client.get("/orders", headers=USER).json()] == [order_id]

    def test_checkout_without_cart(self, client, shop):
        resp = client.post("/orders/checkout", json=SHIPPING, headers=USER)

        assert resp.status_code == 404

    def test_guest_checkout(self, client, shop, stock_of):
        add(client, "A", "M", 1)

        resp = client.post(
            "/orders/checkout",
            json={**SHIPPING, "email": "g@example.com", "name": "Guest"},
        )

        assert resp.status_code == 200
        assert stock_of("A", "M") == 4
        assert client.get("/cart/count").json() == {"count": 0}

    def test_guest_checkout_needs_contact(self, client, shop):
        add(client, "A", "M", 1)

        resp = client.post("/orders/checkout", json=SHIPPING)

        assert resp.status_code == 400
        assert resp.json()["detail"]["kind"] == "invalid_request"

    def test_guest_checkout_failed_verification(self, client, shop, stock_of):
        add(client, "A", "M", 1)
        app.dependency_overrides[get_verifier] = lambda: StubVerifier(False)
        try:
            resp = client.post(
                "/orders/checkout",
                json={**SHIPPING, "email": "g@example.com", "name": "Guest", "captchaToken": "x"},
            )
        finally:
            app.dependency_overrides.pop(get_verifier, None)

        assert resp.status_code == 400
        assert resp.json()["detail"]["kind"] == "verification_failed"
        assert stock_of("A", "M") == 5
        assert client.get("/cart/count").json() == {"count": 1}


class TestAdmin:
    def test_requires_admin_role(self, client, shop):
        resp = client.get("/admin/orders", headers=USER)

        assert resp.status_code == 403

    def test_status_flow(self, client, shop, stock_of):
        add(client, "A", "M", 2, USER)
        order_id = client.post("/orders/checkout", json=SHIPPING, headers=USER).json()["orderId"]

        resp = client.post(f"/admin/orders/{order_id}/status", json={"status": "confirmed"}, headers=ADMIN)
        assert resp.json()["status"] == "CONFIRMED"

        resp = client.post(f"/admin/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=ADMIN)
        assert resp.json()["status"] == "CANCELLED"
        assert stock_of("A", "M") == 5

        resp = client.post(f"/admin/orders/{order_id}/status", json={"status": "FULFILLED"}, headers=ADMIN)
        assert resp.status_code == 409
        assert resp.json()["detail"]["kind"] == "invalid_transition"

    def test_unknown_status_name(self, client, shop):
        resp = client.post("/admin/orders/1/status", json={"status": "SHIPPED"}, headers=ADMIN)

        assert resp.status_code == 400

    def test_listing_filter(self, client, shop):
        add(client, "A", "M", 1, USER)
        order_id = client.post("/orders/checkout", json=SHIPPING, headers=USER).json()["orderId"]

        placed = client.get("/admin/orders", params={"status": "PLACED"}, headers=ADMIN).json()
        confirmed = client.get("/admin/orders", params={"status": "CONFIRMED"}, headers=ADMIN).json()

        assert [o["orderId"] for o in placed] == [order_id]
        assert confirmed == []

    def test_set_stock(self, client, shop, stock_of):
        resp = client.put("/admin/products/B/sizes/L", json={"stock": 7}, headers=ADMIN)

        assert resp.json() == {"size": "L", "stock": 7}
        assert stock_of("B", "L") == 7

    def test_negative_stock_is_rejected(self, client, shop):
        resp = client.put("/admin/products/B/sizes/L", json={"stock": -1}, headers=ADMIN)

        assert resp.status_code == 422


class TestUnknownIdentity:
    def test_cart_for_user_without_account(self, client, shop):
        resp = add(client, "A", "M", 1, {"X-User-Id": "999"})

        assert resp.status_code == 404
        assert resp.json()["detail"]["kind"] == "not_found"
