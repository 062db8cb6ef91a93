"""
Unit tests for PaymentService settlement and the Razorpay connector
"""
import asyncio
import hashlib
import hmac
import json
from unittest.mock import AsyncMock, patch

import pytest

from kalakari.connectors.razorpay_connector import (
    RazorpayConnector,
    from_paise,
    to_paise,
    verify_payment_signature,
    verify_webhook_signature,
)
from kalakari.core.config import settings
from kalakari.core.errors import PaymentGatewayError, ValidationFailedError
from kalakari.domain.order import OrderCreate
from kalakari.domain.payment import VerifyPaymentRequest
from kalakari.services.order_service import OrderService
from kalakari.services.payment_service import PaymentService


def sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


@pytest.fixture
def placed_order(db, customer, make_product, shipping_address):
    """Pending order for 2 of a 5-unit product, linked to gateway order order_TEST"""
    product = make_product(stock=5)
    order = OrderService(db).create_order(
        customer,
        OrderCreate(items=[{"product_id": product.id, "quantity": 2}], shipping_address=shipping_address),
    )
    order.gateway_order_id = "order_TEST"
    db.commit()
    return order, product


class TestSignatures:

    def test_payment_signature(self):
        signature = sign(settings.RAZORPAY_KEY_SECRET, b"order_1|pay_1")

        assert verify_payment_signature("order_1", "pay_1", signature)
        assert not verify_payment_signature("order_1", "pay_2", signature)
        assert not verify_payment_signature("order_1", "pay_1", "")

    def test_webhook_signature(self):
        body = b'{"event":"payment.captured"}'
        signature = sign(settings.RAZORPAY_WEBHOOK_SECRET, body)

        assert verify_webhook_signature(body, signature)
        assert not verify_webhook_signature(body + b" ", signature)

    def test_paise_conversion(self):
        assert to_paise(499.99) == 49999
        assert from_paise(49999) == 499.99
        assert from_paise(None) == 0


class TestVerifyPayment:

    def test_valid_signature_confirms_and_sells_stock(self, db, customer, placed_order):
        order, product = placed_order
        data = VerifyPaymentRequest(
            order_id="order_TEST",
            payment_id="pay_1",
            signature=sign(settings.RAZORPAY_KEY_SECRET, b"order_TEST|pay_1"),
        )

        confirmed = PaymentService(db, RazorpayConnector()).verify_payment(customer, data)

        db.refresh(product)
        assert confirmed.payment_status == "completed"
        assert confirmed.status == "confirmed"
        assert confirmed.inventory_state == "sold"
        assert (product.inventory_total, product.inventory_available, product.inventory_reserved) == (3, 3, 0)

    def test_invalid_signature_fails_and_releases_stock(self, db, customer, placed_order):
        order, product = placed_order
        data = VerifyPaymentRequest(order_id="order_TEST", payment_id="pay_1", signature="bad")

        with pytest.raises(ValidationFailedError, match="Payment verification failed"):
            PaymentService(db, RazorpayConnector()).verify_payment(customer, data)

        db.refresh(order)
        db.refresh(product)
        assert order.payment_status == "failed"
        assert order.status == "cancelled"
        assert order.inventory_state == "released"
        assert (product.inventory_available, product.inventory_reserved) == (5, 0)

    def test_confirmation_is_idempotent(self, db, placed_order):
        order, product = placed_order
        service = PaymentService(db, RazorpayConnector())

        service.confirm_order(order, "pay_1")
        service.confirm_order(order, "pay_1")

        db.refresh(product)
        assert product.inventory_total == 3


class TestWebhook:

    def _deliver(self, db, event: dict, signature: str = None) -> str:
        body = json.dumps(event).encode()
        signature = signature if signature is not None else sign(settings.RAZORPAY_WEBHOOK_SECRET, body)
        return PaymentService(db, RazorpayConnector()).handle_webhook(body, signature)

    def test_captured_confirms_order(self, db, placed_order):
        order, _ = placed_order
        event = {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_9", "order_id": "order_TEST"}}},
        }

        assert self._deliver(db, event) == "payment.captured"

        db.refresh(order)
        assert order.payment_status == "completed"
        assert order.payment_id == "pay_9"

    def test_order_paid_confirms_by_gateway_order(self, db, placed_order):
        order, product = placed_order
        event = {"event": "order.paid", "payload": {"order": {"entity": {"id": "order_TEST", "status": "paid"}}}}

        assert self._deliver(db, event) == "order.paid"

        db.refresh(order)
        db.refresh(product)
        assert order.payment_status == "completed"
        assert order.status == "confirmed"
        assert product.inventory_reserved == 0

    def test_order_paid_for_unknown_order_is_acknowledged(self, db, placed_order):
        order, _ = placed_order
        event = {"event": "order.paid", "payload": {"order": {"entity": {"id": "order_OTHER"}}}}

        assert self._deliver(db, event) == "order.paid"

        db.refresh(order)
        assert order.payment_status == "pending"

    def test_failed_releases_reservation(self, db, placed_order):
        order, product = placed_order
        event = {
            "event": "payment.failed",
            "payload": {"payment": {"entity": {
                "id": "pay_9", "order_id": "order_TEST", "error_description": "Card declined",
            }}},
        }

        self._deliver(db, event)

        db.refresh(order)
        db.refresh(product)
        assert order.payment_failure_reason == "Card declined"
        assert product.inventory_available == 5

    def test_unknown_event_is_acknowledged(self, db, placed_order):
        assert self._deliver(db, {"event": "refund.created", "payload": {}}) == "refund.created"

    def test_bad_signature_rejected(self, db):
        with pytest.raises(ValidationFailedError, match="Invalid signature"):
            self._deliver(db, {"event": "payment.captured"}, signature="nope")

    def test_missing_signature_rejected(self, db):
        with pytest.raises(ValidationFailedError, match="Missing signature"):
            self._deliver(db, {"event": "payment.captured"}, signature="")


class TestRazorpayConnector:

    def test_create_order_converts_amounts(self):
        connector = RazorpayConnector(key_id="rzp_key", key_secret="rzp_secret")
        gateway_reply = {
            "id": "order_ABC", "amount": 64000, "currency": "INR",
            "receipt": "ORD202403090001", "status": "created", "created_at": 1709942400,
        }

        with patch.object(connector, "_make_request", new=AsyncMock(return_value=gateway_reply)) as request:
            result = asyncio.run(connector.create_order(640, receipt="ORD202403090001"))

        method, endpoint, payload = request.call_args.args
        assert (method, endpoint) == ("POST", "/orders")
        assert payload["amount"] == 64000
        assert result["amount"] == 640.0
        assert result["amount_paise"] == 64000
        assert result["created_at"].startswith("2024-03-09")

    def test_missing_credentials(self, monkeypatch):
        connector = RazorpayConnector(key_id="rzp_key", key_secret="rzp_secret")
        connector.key_secret = ""

        with pytest.raises(PaymentGatewayError, match="not configured"):
            asyncio.run(connector.fetch_payment("pay_1"))
