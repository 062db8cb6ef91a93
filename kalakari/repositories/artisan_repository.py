"""
Artisan Repository - seller profiles
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from kalakari.models import Artisan


class ArtisanRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, artisan_id: int) -> Optional[Artisan]:
        return self.db.query(Artisan).options(joinedload(Artisan.user)).filter(Artisan.id == artisan_id).first()

    def find_by_user_id(self, user_id: int) -> Optional[Artisan]:
        return self.db.query(Artisan).options(joinedload(Artisan.user)).filter(Artisan.user_id == user_id).first()

    def find_public(
        self,
        craft_type: Optional[str] = None,
        state: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Artisan], int]:
        """Approved and verified artisans, best rated first"""
        query = (
            self.db.query(Artisan)
            .options(joinedload(Artisan.user))
            .filter(Artisan.is_approved.is_(True), Artisan.is_verified.is_(True))
        )
        if craft_type:
            query = query.filter(Artisan.craft_type == craft_type)
        if state:
            query = query.filter(Artisan.state == state)

        total = query.count()
        artisans = (
            query.order_by(Artisan.rating_average.desc(), Artisan.created_at.desc(), Artisan.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return artisans, total

    def find_for_admin(
        self,
        status: Optional[str] = None,
        craft_type: Optional[str] = None,
        state: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Artisan], int]:
        query = self.db.query(Artisan).options(joinedload(Artisan.user))
        if status == "pending":
            query = query.filter(Artisan.is_approved.is_(False))
        elif status == "approved":
            query = query.filter(Artisan.is_approved.is_(True))
        if craft_type:
            query = query.filter(Artisan.craft_type == craft_type)
        if state:
            query = query.filter(Artisan.state == state)

        total = query.count()
        artisans = query.order_by(Artisan.created_at.desc(), Artisan.id.desc()).offset(offset).limit(limit).all()
        return artisans, total

    def search_names(self, term: str, limit: int = 3) -> List[Artisan]:
        return (
            self.db.query(Artisan)
            .filter(Artisan.is_approved.is_(True), Artisan.business_name.ilike(f"%{term}%"))
            .order_by(Artisan.rating_average.desc(), Artisan.id)
            .limit(limit)
            .all()
        )

    def top_by_sales(self, limit: int = 5) -> List[Artisan]:
        return (
            self.db.query(Artisan)
            .options(joinedload(Artisan.user))
            .filter(Artisan.is_approved.is_(True))
            .order_by(Artisan.total_sales.desc(), Artisan.id)
            .limit(limit)
            .all()
        )

    def count(self, approved: Optional[bool] = None) -> int:
        query = self.db.query(Artisan)
        if approved is not None:
            query = query.filter(Artisan.is_approved.is_(approved))
        return query.count()

    def add(self, artisan: Artisan) -> Artisan:
        self.db.add(artisan)
        self.db.flush()
        return artisan
