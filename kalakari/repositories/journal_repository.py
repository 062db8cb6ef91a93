"""
Journal Repository
"""
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, or_, update
from sqlalchemy.orm import Session, joinedload

from kalakari.models import JournalEntry


class JournalRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, entry_id: int) -> Optional[JournalEntry]:
        return (
            self.db.query(JournalEntry)
            .options(joinedload(JournalEntry.author))
            .filter(JournalEntry.id == entry_id)
            .first()
        )

    def find_published(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[JournalEntry], int]:
        query = (
            self.db.query(JournalEntry)
            .options(joinedload(JournalEntry.author))
            .filter(JournalEntry.is_published.is_(True))
        )
        if category:
            query = query.filter(JournalEntry.category == category)
        if featured is not None:
            query = query.filter(JournalEntry.is_featured.is_(featured))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                JournalEntry.title.ilike(pattern),
                JournalEntry.excerpt.ilike(pattern),
                cast(JournalEntry.tags, String).ilike(pattern),
            ))

        total = query.count()
        entries = query.order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc()).offset(offset).limit(limit).all()
        return entries, total

    def increment_views(self, entry: JournalEntry):
        self.db.flush()
        self.db.execute(
            update(JournalEntry)
            .where(JournalEntry.id == entry.id)
            .values(views=JournalEntry.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(entry)

    def add(self, entry: JournalEntry) -> JournalEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def delete(self, entry: JournalEntry):
        self.db.delete(entry)
        self.db.flush()
