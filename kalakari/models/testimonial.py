"""
Customer testimonials, published after admin approval
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin


class Testimonial(TimestampMixin, Base):
    __tablename__ = "testimonials"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_testimonial_per_customer"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False, index=True)
    images = Column(JSON, default=list)

    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    admin_notes = Column(String(500))
    approved_by = Column(Integer, ForeignKey("users.id"))
    approved_at = Column(DateTime(timezone=True))

    product = relationship("Product")
    user = relationship("User", foreign_keys=[user_id])
