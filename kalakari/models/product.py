"""
Product catalog
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, Float, ForeignKey, JSON, DECIMAL, CheckConstraint
)
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin


class Product(TimestampMixin, Base):
    """
    Catalog product

    Inventory is tracked as three counters:
    - inventory_total: units the artisan holds (sold units leave the total)
    - inventory_available: units a customer can still order
    - inventory_reserved: units held by orders awaiting payment/delivery
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("inventory_available >= 0", name="ck_products_available_non_negative"),
        CheckConstraint("inventory_reserved >= 0", name="ck_products_reserved_non_negative"),
        CheckConstraint("inventory_available + inventory_reserved <= inventory_total",
                        name="ck_products_inventory_within_total"),
    )

    id = Column(Integer, primary_key=True, index=True)
    artisan_id = Column(Integer, ForeignKey("artisans.id", ondelete="CASCADE"), index=True, nullable=False)

    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    subcategory = Column(String(100))

    # Pricing
    price = Column(DECIMAL(12, 2), nullable=False, index=True)
    original_price = Column(DECIMAL(12, 2))
    discount = Column(Integer, default=0)

    images = Column(JSON, default=list)
    variants = Column(JSON, default=list)
    materials = Column(JSON, default=list)
    colors = Column(JSON, default=list)
    tags = Column(JSON, default=list)
    dimensions = Column(JSON)
    shipping = Column(JSON)

    # Inventory
    inventory_total = Column(Integer, nullable=False, default=0)
    inventory_available = Column(Integer, nullable=False, default=0)
    inventory_reserved = Column(Integer, nullable=False, default=0)

    # Flags
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False, index=True)

    # Stats
    stats_views = Column(Integer, default=0, nullable=False)
    stats_likes = Column(Integer, default=0, nullable=False)
    stats_shares = Column(Integer, default=0, nullable=False)
    stats_orders = Column(Integer, default=0, nullable=False, index=True)

    rating_average = Column(Float, default=0.0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    artisan = relationship("Artisan", back_populates="products")
