"""
Contact Repository - the admin inbox for contact-form submissions
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from kalakari.models import ContactMessage


class ContactRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, contact_id: int) -> Optional[ContactMessage]:
        return self.db.query(ContactMessage).filter(ContactMessage.id == contact_id).first()

    def find_all(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ContactMessage], int]:
        query = self.db.query(ContactMessage)
        if status:
            query = query.filter(ContactMessage.status == status)
        if category:
            query = query.filter(ContactMessage.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ContactMessage.name.ilike(pattern),
                ContactMessage.email.ilike(pattern),
                ContactMessage.subject.ilike(pattern),
                ContactMessage.message.ilike(pattern),
            ))

        total = query.count()
        items = (
            query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            .offset(offset).limit(limit).all()
        )
        return items, total

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.query(ContactMessage.status, func.count(ContactMessage.id)).group_by(ContactMessage.status).all()
        return {status: count for status, count in rows}

    def add(self, contact: ContactMessage) -> ContactMessage:
        self.db.add(contact)
        self.db.flush()
        return contact

    def delete(self, contact: ContactMessage):
        self.db.delete(contact)
        self.db.flush()
