"""
Testimonial Repository
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from kalakari.models import Testimonial


class TestimonialRepository:

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Testimonial).options(
            joinedload(Testimonial.user), joinedload(Testimonial.product)
        )

    def find_by_id(self, testimonial_id: int) -> Optional[Testimonial]:
        return self._query().filter(Testimonial.id == testimonial_id).first()

    def find_by_product_and_user(self, product_id: int, user_id: int) -> Optional[Testimonial]:
        return (
            self.db.query(Testimonial)
            .filter(Testimonial.product_id == product_id, Testimonial.user_id == user_id)
            .first()
        )

    def find_approved(
        self,
        featured: Optional[bool] = None,
        rating: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Testimonial], int]:
        query = self._query().filter(Testimonial.is_approved.is_(True))
        if featured is not None:
            query = query.filter(Testimonial.is_featured.is_(featured))
        if rating:
            query = query.filter(Testimonial.rating == rating)

        total = query.count()
        items = query.order_by(Testimonial.created_at.desc(), Testimonial.id.desc()).offset(offset).limit(limit).all()
        return items, total

    def find_all(
        self,
        approved: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Testimonial], int]:
        query = self._query()
        if approved is not None:
            query = query.filter(Testimonial.is_approved.is_(approved))

        total = query.count()
        items = query.order_by(Testimonial.created_at.desc(), Testimonial.id.desc()).offset(offset).limit(limit).all()
        return items, total

    def add(self, testimonial: Testimonial) -> Testimonial:
        self.db.add(testimonial)
        self.db.flush()
        return testimonial

    def delete(self, testimonial: Testimonial):
        self.db.delete(testimonial)
        self.db.flush()
