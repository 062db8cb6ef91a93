"""
Order Domain Models

Checkout requests, status/cancellation requests and the order projection.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PAYMENT_METHODS = ("razorpay", "card", "upi", "netbanking", "cod", "wallet")
ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "returned")

# Forward-only lifecycle an artisan can move an order through
STATUS_FLOW = ("pending", "confirmed", "processing", "shipped", "delivered")


class ShippingAddress(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    pincode: str = Field(..., min_length=1, max_length=10)
    phone: str = Field(..., min_length=1, max_length=20)
    country: str = "India"


class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=100)
    variant: Optional[dict] = None


class OrderCreate(BaseModel):
    """
    Checkout request

    Either pass `items` explicitly or set `from_cart` to check out the
    caller's cart (which is emptied once the order is placed).
    """

    items: Optional[List[OrderItemIn]] = None
    from_cart: bool = False
    shipping_address: ShippingAddress
    billing_address: Optional[ShippingAddress] = None
    payment_method: Literal["razorpay", "card", "upi", "netbanking", "cod", "wallet"] = "razorpay"
    notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_items(self):
        if self.items is not None and len(self.items) == 0:
            raise ValueError("Order must contain at least one item")
        if self.items is None and not self.from_cart:
            raise ValueError("Order must contain at least one item")
        return self


class OrderStatusUpdate(BaseModel):
    status: Literal["confirmed", "processing", "shipped", "delivered"]
    note: Optional[str] = Field(None, max_length=500)
    tracking_number: Optional[str] = Field(None, max_length=100)
    carrier: Optional[str] = Field(None, max_length=100)


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class OrderItem(BaseModel):
    id: int
    product_id: int
    artisan_id: int
    product_name: str
    quantity: int
    unit_price: float
    line_total: float
    variant: Optional[dict] = None

    model_config = ConfigDict(from_attributes=True)


class StatusHistoryEntry(BaseModel):
    status: str
    comment: Optional[str] = None
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Pricing(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    discount: float
    total: float


class PaymentInfo(BaseModel):
    method: str
    status: str
    gateway_order_id: Optional[str] = None
    payment_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None


class Tracking(BaseModel):
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class Cancellation(BaseModel):
    reason: Optional[str] = None
    cancelled_by: Optional[int] = None
    cancelled_at: Optional[datetime] = None
    refund_status: Optional[str] = None


class Order(BaseModel):
    id: int
    order_number: str
    customer_id: int
    items: List[OrderItem]
    total_items: int
    shipping_address: dict
    billing_address: Optional[dict] = None
    pricing: Pricing
    payment: PaymentInfo
    status: str
    inventory_state: str
    status_history: List[StatusHistoryEntry] = []
    tracking: Tracking
    cancellation: Optional[Cancellation] = None
    customer_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, order, artisan_id: Optional[int] = None) -> "Order":
        """
        Build the projection; with `artisan_id` only that artisan's lines are included
        """
        items = [item for item in order.items if artisan_id is None or item.artisan_id == artisan_id]

        cancellation = None
        if order.cancelled_at is not None:
            cancellation = Cancellation(
                reason=order.cancellation_reason,
                cancelled_by=order.cancelled_by,
                cancelled_at=order.cancelled_at,
                refund_status=order.refund_status,
            )

        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            items=[OrderItem.model_validate(item) for item in items],
            total_items=sum(item.quantity for item in items),
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            pricing=Pricing(
                subtotal=order.subtotal,
                shipping=order.shipping_cost,
                tax=order.tax_amount,
                discount=order.discount_amount,
                total=order.total,
            ),
            payment=PaymentInfo(
                method=order.payment_method,
                status=order.payment_status,
                gateway_order_id=order.gateway_order_id,
                payment_id=order.payment_id,
                paid_at=order.paid_at,
                failure_reason=order.payment_failure_reason,
            ),
            status=order.status,
            inventory_state=order.inventory_state,
            status_history=[StatusHistoryEntry.model_validate(h) for h in order.status_history],
            tracking=Tracking(
                carrier=order.carrier,
                tracking_number=order.tracking_number,
                estimated_delivery=order.estimated_delivery,
                delivered_at=order.delivered_at,
            ),
            cancellation=cancellation,
            customer_notes=order.customer_notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
