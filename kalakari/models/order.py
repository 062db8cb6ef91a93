"""
Orders, order lines and status history
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, DECIMAL
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin, utcnow


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)

    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON)

    # Pricing
    subtotal = Column(DECIMAL(12, 2), nullable=False)
    shipping_cost = Column(DECIMAL(12, 2), nullable=False, default=0)
    tax_amount = Column(DECIMAL(12, 2), nullable=False, default=0)
    discount_amount = Column(DECIMAL(12, 2), nullable=False, default=0)
    total = Column(DECIMAL(12, 2), nullable=False)

    # Payment
    payment_method = Column(String(20), nullable=False, default="razorpay")
    payment_status = Column(String(20), nullable=False, default="pending", index=True)
    gateway_order_id = Column(String(64), index=True)
    payment_id = Column(String(64))
    paid_at = Column(DateTime(timezone=True))
    payment_failure_reason = Column(Text)

    # Lifecycle
    status = Column(String(20), nullable=False, default="pending", index=True)
    # reserved -> sold (payment confirmed or delivered) | released (cancelled/failed)
    inventory_state = Column(String(10), nullable=False, default="reserved")

    # Tracking
    carrier = Column(String(100))
    tracking_number = Column(String(100))
    estimated_delivery = Column(DateTime(timezone=True))
    delivered_at = Column(DateTime(timezone=True))

    # Notes
    customer_notes = Column(Text)
    admin_notes = Column(Text)

    # Cancellation
    cancellation_reason = Column(Text)
    cancelled_by = Column(Integer, ForeignKey("users.id"))
    cancelled_at = Column(DateTime(timezone=True))
    refund_status = Column(String(20))

    customer = relationship("User", foreign_keys=[customer_id])
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")
    status_history = relationship("OrderStatusHistory", back_populates="order",
                                  cascade="all, delete-orphan", order_by="OrderStatusHistory.id")

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    artisan_id = Column(Integer, ForeignKey("artisans.id"), index=True, nullable=False)

    # Snapshot at time of sale
    product_name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(DECIMAL(12, 2), nullable=False)
    variant = Column(JSON, default=dict)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
    artisan = relationship("Artisan")

    @property
    def line_total(self):
        return self.unit_price * self.quantity


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)

    status = Column(String(20), nullable=False)
    comment = Column(Text)
    updated_by = Column(Integer, ForeignKey("users.id"))
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    order = relationship("Order", back_populates="status_history")
