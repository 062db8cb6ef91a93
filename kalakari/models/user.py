"""
User accounts, saved addresses and cart lines
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin, utcnow


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20))
    password_hash = Column(String(255), nullable=False)

    # customer | artisan | admin
    role = Column(String(20), nullable=False, default="customer", index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan",
                             order_by="Address.id")
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan",
                              order_by="CartItem.id")
    artisan_profile = relationship("Artisan", back_populates="user", uselist=False)


class Address(TimestampMixin, Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    type = Column(String(10), nullable=False, default="home")  # home | work | other
    name = Column(String(50), nullable=False)
    street = Column(String(200), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    pincode = Column(String(6), nullable=False)
    phone = Column(String(10), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="addresses")


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", "variant_key", name="uq_cart_line"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    # variant as given by the client, plus a canonical key so equal variants merge
    variant = Column(JSON, default=dict)
    variant_key = Column(String(500), nullable=False, default="")
    added_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product")
