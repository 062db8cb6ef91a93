"""
Journal (editorial blog) entries
"""
from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from kalakari.core.database import Base
from .base import TimestampMixin


class JournalEntry(TimestampMixin, Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(String(300))
    category = Column(String(50), nullable=False, index=True)
    tags = Column(JSON, default=list)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    featured_image = Column(String(500), default="")
    images = Column(JSON, default=list)

    is_published = Column(Boolean, default=False, nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    views = Column(Integer, default=0, nullable=False)

    author = relationship("User")
