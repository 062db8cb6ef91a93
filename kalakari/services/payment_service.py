"""
Payment Service
Razorpay checkout: gateway order creation, client-side verification and
webhook events, and their effect on the local order
"""
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from kalakari.connectors.razorpay_connector import (
    RazorpayConnector,
    verify_payment_signature,
    verify_webhook_signature,
)
from kalakari.core.config import settings
from kalakari.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from kalakari.domain.payment import MAX_ORDER_AMOUNT, CreatePaymentOrderRequest, VerifyPaymentRequest
from kalakari.models import Order, OrderStatusHistory, User
from kalakari.repositories import OrderRepository
from kalakari.services.order_service import OrderService

logger = logging.getLogger(__name__)

CONFIRM_EVENTS = ("payment.captured", "order.paid")
FAIL_EVENTS = ("payment.failed",)


class PaymentService:

    def __init__(self, db: Session, connector: Optional[RazorpayConnector] = None):
        self.db = db
        self.orders = OrderRepository(db)
        self.order_service = OrderService(db)
        self.connector = connector or RazorpayConnector()

    async def create_gateway_order(self, customer: User, data: CreatePaymentOrderRequest) -> Dict[str, Any]:
        """
        Create a Razorpay order, for a local order or an explicit amount

        Returns the data the checkout widget needs (gateway order id, amount
        in paise, currency and the public key id).
        """
        order = None
        if data.order_id is not None:
            order = self.orders.find_by_id(data.order_id)
            if not order:
                raise NotFoundError("Order not found")
            if order.customer_id != customer.id:
                raise PermissionDeniedError("Access denied")
            if order.payment_status == "completed":
                raise ValidationFailedError("Order is already paid")
            if order.status == "cancelled":
                raise ValidationFailedError("Order has been cancelled")
            amount = float(order.total)
            receipt = order.order_number
        else:
            amount = data.amount
            receipt = data.receipt or f"receipt_{int(time.time() * 1000)}_{customer.id}"

        if amount > MAX_ORDER_AMOUNT:
            raise ValidationFailedError("Maximum order amount is ₹10,00,000")

        notes = {"customer_id": customer.id, **(data.notes or {})}
        if order is not None:
            notes["order_number"] = order.order_number

        gateway_order = await self.connector.create_order(
            amount=amount,
            currency=data.currency,
            receipt=receipt,
            notes=notes,
        )

        if order is not None:
            order.gateway_order_id = gateway_order["id"]
            self.db.commit()

        return {
            "order_id": gateway_order["id"],
            "amount": gateway_order["amount_paise"],
            "currency": gateway_order["currency"],
            "receipt": gateway_order["receipt"],
            "key_id": self.connector.key_id,
            "local_order_id": order.id if order is not None else None,
        }

    def verify_payment(self, customer: User, data: VerifyPaymentRequest) -> Optional[Order]:
        """
        Check the checkout signature and settle the local order

        Raises:
            ValidationFailedError: "Payment verification failed" on a bad signature,
                after the local order (if any) has been failed and its stock released
        """
        order = self.orders.find_by_gateway_order_id(data.order_id)
        if order is not None and order.customer_id != customer.id:
            raise PermissionDeniedError("Access denied")

        if not verify_payment_signature(data.order_id, data.payment_id, data.signature):
            if order is not None:
                self.fail_order(order, reason="Payment signature verification failed")
            raise ValidationFailedError("Payment verification failed")

        if order is not None:
            self.confirm_order(order, data.payment_id, actor_id=customer.id)
            return self.orders.find_by_id(order.id)
        return None

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        return await self.connector.fetch_payment(payment_id)

    def handle_webhook(self, body: bytes, signature: Optional[str]) -> str:
        """
        Process a Razorpay webhook delivery

        Returns:
            The event name
        """
        if not signature:
            raise ValidationFailedError("Missing signature")

        if not verify_webhook_signature(body, signature):
            logger.warning("Webhook rejected: invalid signature")
            raise ValidationFailedError("Invalid signature")

        try:
            event = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationFailedError("Invalid webhook payload") from e

        event_name = event.get("event", "")
        payload = event.get("payload") or {}
        payment = (payload.get("payment") or {}).get("entity") or {}
        gateway_order = (payload.get("order") or {}).get("entity") or {}
        gateway_order_id = payment.get("order_id") or gateway_order.get("id")

        if event_name not in CONFIRM_EVENTS + FAIL_EVENTS:
            logger.info(f"Unhandled webhook event: {event_name}")
            return event_name

        order = self.orders.find_by_gateway_order_id(gateway_order_id) if gateway_order_id else None
        if order is None:
            logger.warning(f"Webhook {event_name}: no local order for gateway order {gateway_order_id}")
            return event_name

        if event_name in CONFIRM_EVENTS:
            self.confirm_order(order, payment.get("id"))
        else:
            reason = payment.get("error_description") or "Payment failed"
            self.fail_order(order, reason=reason)

        logger.info(f"Webhook {event_name} processed for order {order.order_number}")
        return event_name

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def confirm_order(self, order: Order, payment_id: Optional[str], actor_id: Optional[int] = None):
        """Payment completed: confirm the order and move stock reserved -> sold (idempotent)"""
        if order.payment_status == "completed":
            logger.info(f"Order {order.order_number} already paid, ignoring duplicate confirmation")
            return

        try:
            order.payment_status = "completed"
            if payment_id:
                order.payment_id = payment_id
            order.paid_at = datetime.now(timezone.utc)
            order.payment_failure_reason = None

            if order.status == "pending":
                order.status = "confirmed"
                order.status_history.append(OrderStatusHistory(
                    status="confirmed",
                    comment="Payment received",
                    updated_by=actor_id,
                ))
            elif order.status == "cancelled":
                logger.warning(f"Payment captured for cancelled order {order.order_number}, refund required")
                order.refund_status = "pending"

            self.order_service.commit_inventory(order)
            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

    def fail_order(self, order: Order, reason: str):
        """Payment failed: cancel the order and roll back its reservation"""
        if order.payment_status == "completed":
            logger.warning(f"Ignoring payment failure for already paid order {order.order_number}")
            return

        try:
            order.payment_status = "failed"
            order.payment_failure_reason = reason

            if order.status != "cancelled":
                order.status = "cancelled"
                order.cancellation_reason = "Payment failed"
                order.cancelled_at = datetime.now(timezone.utc)
                order.refund_status = "completed"
                order.status_history.append(OrderStatusHistory(status="cancelled", comment=reason))

            self.order_service.release_inventory(order)
            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} failed payment: {reason}")


def get_payment_connector() -> RazorpayConnector:
    """FastAPI dependency yielding the configured gateway client"""
    return RazorpayConnector(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_API_URL,
    )
