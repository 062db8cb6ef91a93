"""
Razorpay API Connector
Handles order creation, payment lookup and signature verification against
the Razorpay REST API (https://razorpay.com/docs/api/)

Amounts cross this boundary in paise; callers work in rupees.
"""
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from kalakari.core.config import settings
from kalakari.core.errors import PaymentGatewayError

logger = logging.getLogger(__name__)


def to_paise(amount) -> int:
    return int(round(float(amount) * 100))


def from_paise(amount: Optional[int]) -> float:
    return (amount or 0) / 100


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str,
                             secret: Optional[str] = None) -> bool:
    """Checkout signature: HMAC-SHA256(key_secret, "order_id|payment_id") as hex"""
    secret = secret or settings.RAZORPAY_KEY_SECRET
    if not secret or not signature:
        return False

    expected = _hmac_hex(secret, f"{order_id}|{payment_id}".encode())
    is_valid = hmac.compare_digest(expected.encode(), signature.encode())

    if is_valid:
        logger.info(f"Payment signature verified for {payment_id}")
    else:
        logger.warning(f"Invalid payment signature for {payment_id}")
    return is_valid


def verify_webhook_signature(body: bytes, signature: str, secret: Optional[str] = None) -> bool:
    """Webhook signature: HMAC-SHA256(webhook_secret, raw request body) as hex"""
    secret = secret or settings.RAZORPAY_WEBHOOK_SECRET
    if not secret or not signature:
        return False
    return hmac.compare_digest(_hmac_hex(secret, body).encode(), signature.encode())


class RazorpayConnector:
    """
    Connector for the Razorpay REST API

    Authenticates with HTTP basic auth (key id / key secret). Any transport or
    API failure surfaces as PaymentGatewayError (502).
    """

    def __init__(self, key_id: str = None, key_secret: str = None, base_url: str = None):
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self.base_url = (base_url or settings.RAZORPAY_API_URL).rstrip("/")

        if not self.key_id or not self.key_secret:
            logger.warning("Razorpay credentials not configured. Set RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET")

    async def _make_request(self, method: str, endpoint: str, payload: Optional[Dict] = None) -> Dict[str, Any]:
        if not self.key_id or not self.key_secret:
            raise PaymentGatewayError("Payment gateway is not configured")

        url = f"{self.base_url}{endpoint}"

        async with httpx.AsyncClient(auth=(self.key_id, self.key_secret), timeout=30.0) as client:
            try:
                response = await client.request(method, url, json=payload)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                logger.error(f"Razorpay request failed: {e.response.status_code} - {e.response.text}")
                description = None
                try:
                    description = e.response.json().get("error", {}).get("description")
                except ValueError:
                    pass
                raise PaymentGatewayError(description or "Payment gateway request failed") from e
            except httpx.HTTPError as e:
                logger.error(f"Razorpay request error: {e}")
                raise PaymentGatewayError("Payment gateway unavailable") from e

    async def create_order(self, amount: float, currency: str = "INR", receipt: str = None,
                           notes: Optional[Dict] = None) -> Dict[str, Any]:
        """
        Create a gateway order

        Args:
            amount: Amount in rupees (converted to paise)
            currency: ISO currency code
            receipt: Merchant receipt reference
            notes: Free-form key/values stored with the order

        Returns:
            {"id", "amount" (rupees), "amount_paise", "currency", "receipt", "status", "created_at"}
        """
        payload = {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1,
            "notes": {k: str(v) for k, v in (notes or {}).items()},
        }

        order = await self._make_request("POST", "/orders", payload)
        logger.info(f"Razorpay order created: {order.get('id')} for amount {amount} {currency}")

        return {
            "id": order["id"],
            "amount": from_paise(order.get("amount")),
            "amount_paise": order.get("amount"),
            "currency": order.get("currency", currency),
            "receipt": order.get("receipt"),
            "status": order.get("status"),
            "created_at": _timestamp(order.get("created_at")),
        }

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        """Payment details with money fields converted back to rupees"""
        payment = await self._make_request("GET", f"/payments/{payment_id}")

        return {
            "id": payment.get("id"),
            "order_id": payment.get("order_id"),
            "amount": from_paise(payment.get("amount")),
            "currency": payment.get("currency"),
            "status": payment.get("status"),
            "method": payment.get("method"),
            "description": payment.get("description"),
            "email": payment.get("email"),
            "contact": payment.get("contact"),
            "fee": from_paise(payment.get("fee")),
            "tax": from_paise(payment.get("tax")),
            "acquirer_data": payment.get("acquirer_data"),
            "created_at": _timestamp(payment.get("created_at")),
        }


def _timestamp(epoch_seconds: Optional[int]) -> Optional[str]:
    if not epoch_seconds:
        return None
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat()
