"""
Contact-form submissions (admin inbox)
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, JSON

from kalakari.core.database import Base
from .base import TimestampMixin


class ContactMessage(TimestampMixin, Base):
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(10))
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)

    # general | support | sales | partnership | artisan | complaint
    category = Column(String(20), default="general", nullable=False, index=True)
    # new | in-progress | resolved | closed
    status = Column(String(20), default="new", nullable=False, index=True)
    # low | medium | high | urgent
    priority = Column(String(10), default="medium", nullable=False)

    response = Column(Text)
    admin_notes = Column(String(1000))
    updated_by = Column(Integer, ForeignKey("users.id"))
    tags = Column(JSON, default=list)

    ip_address = Column(String(64))
    user_agent = Column(String(500))
