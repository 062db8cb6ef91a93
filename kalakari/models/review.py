"""
Product reviews, helpful votes and abuse reports
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin, utcnow


class Review(TimestampMixin, Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("product_id", "customer_id", name="uq_review_per_customer"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    rating = Column(Integer, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    comment = Column(Text, nullable=False)
    images = Column(JSON, default=list)
    is_verified = Column(Boolean, default=False, nullable=False)

    helpful_count = Column(Integer, default=0, nullable=False)

    response_text = Column(String(500))
    responded_by = Column(Integer, ForeignKey("users.id"))
    responded_at = Column(DateTime(timezone=True))

    # pending | approved | rejected
    status = Column(String(10), default="pending", nullable=False, index=True)
    admin_notes = Column(String(200))

    product = relationship("Product")
    customer = relationship("User", foreign_keys=[customer_id])
    helpful_votes = relationship("ReviewHelpfulVote", cascade="all, delete-orphan")
    reports = relationship("ReviewReport", cascade="all, delete-orphan", order_by="ReviewReport.id")


class ReviewHelpfulVote(Base):
    __tablename__ = "review_helpful_votes"
    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_helpful_vote"),
    )

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


class ReviewReport(Base):
    __tablename__ = "review_reports"
    __table_args__ = (
        UniqueConstraint("review_id", "reported_by", name="uq_review_report"),
    )

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), index=True, nullable=False)
    reported_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reason = Column(String(500), nullable=False)
    reported_at = Column(DateTime(timezone=True), default=utcnow)
