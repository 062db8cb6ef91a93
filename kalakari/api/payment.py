"""
Payment API Endpoints
Razorpay order creation, checkout verification, payment lookup and webhook
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from kalakari.connectors.razorpay_connector import RazorpayConnector
from kalakari.core.auth import get_current_user, require_customer
from kalakari.core.database import get_db
from kalakari.domain.common import envelope
from kalakari.domain.order import Order as OrderOut
from kalakari.domain.payment import CreatePaymentOrderRequest, VerifyPaymentRequest
from kalakari.models import User
from kalakari.services.payment_service import PaymentService, get_payment_connector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["Payment"])


@router.post("/create-order")
async def create_payment_order(
    payload: CreatePaymentOrderRequest,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
    connector: RazorpayConnector = Depends(get_payment_connector),
):
    data = await PaymentService(db, connector).create_gateway_order(user, payload)
    return envelope(data, message="Payment order created")


@router.post("/verify")
async def verify_payment(
    payload: VerifyPaymentRequest,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
    connector: RazorpayConnector = Depends(get_payment_connector),
):
    """
    Verify the checkout signature returned by the Razorpay widget

    On success the order is confirmed and its reserved stock is sold; on
    failure the order is cancelled and the reservation released (400).
    """
    order = PaymentService(db, connector).verify_payment(user, payload)
    return envelope(
        {
            "order_id": payload.order_id,
            "payment_id": payload.payment_id,
            "order": OrderOut.from_model(order).to_dict() if order is not None else None,
        },
        message="Payment verified successfully",
    )


@router.get("/payment/{payment_id}")
async def get_payment(
    payment_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    connector: RazorpayConnector = Depends(get_payment_connector),
):
    payment = await PaymentService(db, connector).fetch_payment(payment_id)
    return envelope({"payment": payment})


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    db: Session = Depends(get_db),
    connector: RazorpayConnector = Depends(get_payment_connector),
):
    """Authenticated by the X-Razorpay-Signature HMAC over the raw body"""
    body = await request.body()
    signature = request.headers.get("X-Razorpay-Signature")

    event = PaymentService(db, connector).handle_webhook(body, signature)
    return envelope({"event": event}, message="Webhook processed")
