"""
API tests for cart, wishlist, orders and payment
"""
import hashlib
import hmac
import json

import pytest

from kalakari.core.config import settings
from kalakari.main import app
from kalakari.services.payment_service import get_payment_connector


def sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class FakeConnector:
    """Stands in for the gateway client; records created orders"""

    key_id = "rzp_test_key"

    def __init__(self):
        self.created = []

    async def create_order(self, amount, currency="INR", receipt=None, notes=None):
        self.created.append({"amount": amount, "receipt": receipt, "notes": notes})
        return {
            "id": f"order_FAKE{len(self.created)}",
            "amount_paise": int(round(amount * 100)),
            "currency": currency,
            "receipt": receipt,
        }


@pytest.fixture
def gateway():
    fake = FakeConnector()
    app.dependency_overrides[get_payment_connector] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_connector, None)


@pytest.fixture
def place_order(client, customer, headers_for, shipping_address):
    def _place(product, quantity=1, **fields):
        payload = {
            "items": [{"product_id": product.id, "quantity": quantity}],
            "shipping_address": shipping_address,
            **fields,
        }
        response = client.post("/api/orders", json=payload, headers=headers_for(customer))
        assert response.status_code == 201, response.json()
        return response.json()["data"]["order"]

    return _place


class TestCartApi:

    def test_same_line_merges(self, client, customer, make_product, headers_for):
        product = make_product(price="250")
        headers = headers_for(customer)

        client.post("/api/cart", json={"product_id": product.id, "quantity": 1}, headers=headers)
        cart = client.post("/api/cart", json={"product_id": product.id, "quantity": 2},
                           headers=headers).json()["data"]["cart"]

        assert len(cart["items"]) == 1
        assert cart["total_items"] == 3
        assert cart["subtotal"] == 750.0

    def test_variants_are_separate_lines(self, client, customer, make_product, headers_for):
        product = make_product()
        headers = headers_for(customer)

        client.post("/api/cart", json={"product_id": product.id, "variant": {"size": "M", "color": "Red"}},
                    headers=headers)
        client.post("/api/cart", json={"product_id": product.id, "variant": {"color": "Red", "size": "M"}},
                    headers=headers)
        cart = client.post("/api/cart", json={"product_id": product.id, "variant": {"size": "L"}},
                           headers=headers).json()["data"]["cart"]

        assert sorted(item["quantity"] for item in cart["items"]) == [1, 2]

    def test_zero_quantity_removes_line(self, client, customer, make_product, headers_for):
        product = make_product()
        headers = headers_for(customer)
        client.post("/api/cart", json={"product_id": product.id}, headers=headers)

        cart = client.put(f"/api/cart/{product.id}", json={"quantity": 0}, headers=headers).json()["data"]["cart"]

        assert cart["items"] == []

    def test_unknown_product(self, client, customer, headers_for):
        response = client.post("/api/cart", json={"product_id": 999}, headers=headers_for(customer))
        assert response.status_code == 404

    def test_remove_missing_line(self, client, customer, headers_for):
        response = client.delete("/api/cart/999", headers=headers_for(customer))

        assert response.status_code == 404
        assert response.json()["message"] == "Item not found in cart"

    def test_requires_login(self, client):
        assert client.get("/api/cart").status_code == 401


class TestWishlistApi:

    def test_add_check_remove(self, client, customer, make_product, headers_for):
        product = make_product()
        headers = headers_for(customer)

        added = client.post("/api/wishlist", json={"product_id": product.id}, headers=headers)
        duplicate = client.post("/api/wishlist", json={"product_id": product.id}, headers=headers)
        checked = client.get(f"/api/wishlist/check/{product.id}", headers=headers).json()

        assert added.status_code == 201
        assert duplicate.status_code == 400
        assert checked["data"]["in_wishlist"] is True

        client.delete(f"/api/wishlist/{product.id}", headers=headers)
        listed = client.get("/api/wishlist", headers=headers).json()
        assert listed["data"]["items"] == []

    def test_artisans_have_no_wishlist(self, client, make_artisan, headers_for):
        artisan = make_artisan()
        assert client.get("/api/wishlist", headers=headers_for(artisan.user)).status_code == 403


class TestOrdersApi:

    def test_create_reserves_stock(self, client, db, make_product, place_order):
        product = make_product(stock=5)

        order = place_order(product, quantity=2)

        assert order["status"] == "pending"
        assert order["inventory_state"] == "reserved"
        assert order["pricing"] == {"subtotal": 1000.0, "shipping": 0.0, "tax": 180.0, "discount": 0.0,
                                    "total": 1180.0}
        db.refresh(product)
        assert (product.inventory_available, product.inventory_reserved) == (3, 2)

    def test_insufficient_stock(self, client, customer, make_product, headers_for, shipping_address):
        product = make_product(stock=1)

        response = client.post("/api/orders", json={
            "items": [{"product_id": product.id, "quantity": 2}],
            "shipping_address": shipping_address,
        }, headers=headers_for(customer))

        assert response.status_code == 400
        assert response.json()["message"].startswith("Insufficient inventory")

    def test_empty_items_rejected(self, client, customer, headers_for, shipping_address):
        response = client.post("/api/orders", json={"items": [], "shipping_address": shipping_address},
                               headers=headers_for(customer))
        assert response.status_code == 400

    def test_only_owner_can_view(self, client, make_user, make_product, place_order, headers_for):
        order = place_order(make_product())
        stranger = make_user()

        response = client.get(f"/api/orders/{order['id']}", headers=headers_for(stranger))

        assert response.status_code == 403

    def test_artisan_sees_own_lines(self, client, make_product, place_order, headers_for):
        product = make_product()
        order = place_order(product)

        body = client.get("/api/orders/artisan/my-orders", headers=headers_for(product.artisan.user)).json()

        assert [o["id"] for o in body["data"]["orders"]] == [order["id"]]

    def test_artisan_moves_status_forward(self, client, make_product, place_order, headers_for):
        product = make_product()
        order = place_order(product, payment_method="cod")
        headers = headers_for(product.artisan.user)

        confirmed = client.put(f"/api/orders/{order['id']}/status", json={"status": "confirmed"}, headers=headers)
        backwards = client.put(f"/api/orders/{order['id']}/status", json={"status": "confirmed"}, headers=headers)

        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["order"]["status"] == "confirmed"
        assert backwards.status_code == 400

    def test_cancel_releases_stock(self, client, db, customer, make_product, place_order, headers_for):
        product = make_product(stock=4)
        order = place_order(product, quantity=3)

        response = client.put(f"/api/orders/{order['id']}/cancel", json={"reason": "Changed my mind"},
                              headers=headers_for(customer))

        assert response.status_code == 200
        assert response.json()["data"]["order"]["cancellation"]["reason"] == "Changed my mind"
        db.refresh(product)
        assert (product.inventory_available, product.inventory_reserved) == (4, 0)

    def test_history_filters_by_status(self, client, customer, make_product, place_order, headers_for):
        place_order(make_product())

        pending = client.get("/api/orders", params={"status": "pending"}, headers=headers_for(customer)).json()
        shipped = client.get("/api/orders", params={"status": "shipped"}, headers=headers_for(customer)).json()

        assert pending["data"]["pagination"]["total"] == 1
        assert shipped["data"]["orders"] == []


class TestPaymentApi:

    def test_create_gateway_order_for_local_order(self, client, customer, make_product, place_order,
                                                  headers_for, gateway):
        order = place_order(make_product())

        response = client.post("/api/payment/create-order", json={"order_id": order["id"]},
                               headers=headers_for(customer))

        data = response.json()["data"]
        assert response.status_code == 200
        assert data == {
            "order_id": "order_FAKE1",
            "amount": 64000,
            "currency": "INR",
            "receipt": order["order_number"],
            "key_id": "rzp_test_key",
            "local_order_id": order["id"],
        }

    def test_amount_required_without_order(self, client, customer, headers_for, gateway):
        response = client.post("/api/payment/create-order", json={}, headers=headers_for(customer))
        assert response.status_code == 400

    def test_verify_confirms_order(self, client, db, customer, make_product, place_order, headers_for, gateway):
        product = make_product(stock=5)
        order = place_order(product, quantity=2)
        headers = headers_for(customer)
        client.post("/api/payment/create-order", json={"order_id": order["id"]}, headers=headers)

        response = client.post("/api/payment/verify", json={
            "order_id": "order_FAKE1",
            "payment_id": "pay_1",
            "signature": sign(settings.RAZORPAY_KEY_SECRET, b"order_FAKE1|pay_1"),
        }, headers=headers)

        paid = response.json()["data"]["order"]
        assert paid["status"] == "confirmed"
        assert paid["payment"]["status"] == "completed"
        db.refresh(product)
        assert (product.inventory_total, product.inventory_reserved) == (3, 0)

    def test_bad_signature_cancels_order(self, client, customer, make_product, place_order, headers_for, gateway):
        order = place_order(make_product())
        headers = headers_for(customer)
        client.post("/api/payment/create-order", json={"order_id": order["id"]}, headers=headers)

        response = client.post("/api/payment/verify", json={
            "order_id": "order_FAKE1", "payment_id": "pay_1", "signature": "nope",
        }, headers=headers)
        after = client.get(f"/api/orders/{order['id']}", headers=headers).json()["data"]["order"]

        assert response.status_code == 400
        assert response.json()["message"] == "Payment verification failed"
        assert after["status"] == "cancelled"
        assert after["payment"]["status"] == "failed"

    def test_webhook_uses_raw_body(self, client, customer, make_product, place_order, headers_for, gateway):
        order = place_order(make_product())
        headers = headers_for(customer)
        client.post("/api/payment/create-order", json={"order_id": order["id"]}, headers=headers)

        body = json.dumps({
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_9", "order_id": "order_FAKE1"}}},
        }).encode()
        response = client.post("/api/payment/webhook", content=body, headers={
            "Content-Type": "application/json",
            "X-Razorpay-Signature": sign(settings.RAZORPAY_WEBHOOK_SECRET, body),
        })
        after = client.get(f"/api/orders/{order['id']}", headers=headers).json()["data"]["order"]

        assert response.json()["data"] == {"event": "payment.captured"}
        assert after["payment"]["payment_id"] == "pay_9"

    def test_webhook_rejects_bad_signature(self, client, gateway):
        response = client.post("/api/payment/webhook", content=b"{}",
                               headers={"X-Razorpay-Signature": "deadbeef"})
        assert response.status_code == 400
