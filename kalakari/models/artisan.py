"""
Artisan (seller) profiles
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, Float, ForeignKey, JSON, DECIMAL
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin


class Artisan(TimestampMixin, Base):
    __tablename__ = "artisans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    business_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    craft_type = Column(String(50), nullable=False, index=True)
    state = Column(String(50), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    experience = Column(Integer, nullable=False, default=0)
    languages = Column(JSON, default=list)

    # Private: never part of public projections
    bank_details = Column(JSON)
    documents = Column(JSON)

    social_media = Column(JSON)
    profile_image = Column(String(500))
    gallery = Column(JSON, default=list)

    is_verified = Column(Boolean, default=False, nullable=False, index=True)
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    commission_rate = Column(Float, default=10.0, nullable=False)
    total_sales = Column(DECIMAL(14, 2), default=0, nullable=False)

    rating_average = Column(Float, default=0.0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="artisan_profile")
    products = relationship("Product", back_populates="artisan")
