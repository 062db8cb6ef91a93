"""
Review Repository - product reviews, votes and reports
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from kalakari.models import Review, ReviewHelpfulVote, ReviewReport

SORTS = {
    "newest": (Review.created_at.desc(), Review.id.desc()),
    "oldest": (Review.created_at.asc(), Review.id.asc()),
    "rating": (Review.rating.desc(), Review.created_at.desc()),
    "helpful": (Review.helpful_count.desc(), Review.created_at.desc()),
}


class ReviewRepository:

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Review).options(joinedload(Review.customer), selectinload(Review.reports))

    def find_by_id(self, review_id: int) -> Optional[Review]:
        return self._query().filter(Review.id == review_id).first()

    def find_by_product_and_customer(self, product_id: int, customer_id: int) -> Optional[Review]:
        return (
            self.db.query(Review)
            .filter(Review.product_id == product_id, Review.customer_id == customer_id)
            .first()
        )

    def find_for_product(
        self,
        product_id: int,
        status: Optional[str] = "approved",
        rating: Optional[int] = None,
        sort: str = "newest",
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Review], int]:
        query = self._query().filter(Review.product_id == product_id)
        if status:
            query = query.filter(Review.status == status)
        if rating:
            query = query.filter(Review.rating == rating)

        total = query.count()
        reviews = query.order_by(*SORTS.get(sort, SORTS["newest"])).offset(offset).limit(limit).all()
        return reviews, total

    def find_all(
        self,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Review], int]:
        query = self._query()
        if status:
            query = query.filter(Review.status == status)

        total = query.count()
        reviews = query.order_by(*SORTS["newest"]).offset(offset).limit(limit).all()
        return reviews, total

    def rating_breakdown(self, product_id: int, status: str = "approved") -> Dict[int, int]:
        """{1: n, 2: n, ... 5: n} over reviews with the given status"""
        rows = (
            self.db.query(Review.rating, func.count(Review.id))
            .filter(Review.product_id == product_id, Review.status == status)
            .group_by(Review.rating)
            .all()
        )
        breakdown = {star: 0 for star in range(1, 6)}
        breakdown.update({rating: count for rating, count in rows})
        return breakdown

    def approved_rating(self, product_id: int) -> Tuple[float, int]:
        """(average, count) of approved reviews"""
        average, count = (
            self.db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.product_id == product_id, Review.status == "approved")
            .one()
        )
        return float(average or 0), count or 0

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.query(Review.status, func.count(Review.id)).group_by(Review.status).all()
        return {status: count for status, count in rows}

    def count_reported(self) -> int:
        return self.db.query(func.count(func.distinct(ReviewReport.review_id))).scalar() or 0

    def average_rating(self) -> float:
        average = self.db.query(func.avg(Review.rating)).filter(Review.status == "approved").scalar()
        return round(float(average or 0), 2)

    def find_vote(self, review_id: int, user_id: int) -> Optional[ReviewHelpfulVote]:
        return (
            self.db.query(ReviewHelpfulVote)
            .filter(ReviewHelpfulVote.review_id == review_id, ReviewHelpfulVote.user_id == user_id)
            .first()
        )

    def find_report(self, review_id: int, user_id: int) -> Optional[ReviewReport]:
        return (
            self.db.query(ReviewReport)
            .filter(ReviewReport.review_id == review_id, ReviewReport.reported_by == user_id)
            .first()
        )

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, obj):
        self.db.delete(obj)
        self.db.flush()
