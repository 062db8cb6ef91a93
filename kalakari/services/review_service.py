"""
Review Service
Posting, voting, artisan replies, reporting and moderation of product reviews.
A product's rating average/count always reflects its approved reviews only.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from kalakari.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from kalakari.domain.review import ReviewCreate, ReviewModeration
from kalakari.models import Review, ReviewHelpfulVote, ReviewReport, User
from kalakari.repositories import ArtisanRepository, OrderRepository, ProductRepository, ReviewRepository

logger = logging.getLogger(__name__)


class ReviewService:

    def __init__(self, db: Session):
        self.db = db
        self.reviews = ReviewRepository(db)
        self.products = ProductRepository(db)
        self.orders = OrderRepository(db)
        self.artisans = ArtisanRepository(db)

    def _get(self, review_id: int) -> Review:
        review = self.reviews.find_by_id(review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    def create_review(self, product_id: int, customer: User, data: ReviewCreate) -> Review:
        """
        New reviews start as pending; they are marked verified when the
        customer has a delivered order containing the product.
        """
        product = self.products.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if self.reviews.find_by_product_and_customer(product_id, customer.id):
            raise ValidationFailedError("You have already reviewed this product")

        review = Review(
            product_id=product_id,
            customer_id=customer.id,
            rating=data.rating,
            title=data.title,
            comment=data.comment,
            images=data.images,
            is_verified=self.orders.has_delivered_purchase(customer.id, product_id),
            status="pending",
        )
        self.reviews.add(review)
        self.db.commit()

        logger.info(f"Review {review.id} submitted for product {product_id} by user {customer.id}")
        return self._get(review.id)

    def toggle_helpful(self, review_id: int, user: User) -> Review:
        """Adds the caller's helpful vote, or removes it if already present"""
        review = self._get(review_id)

        vote = self.reviews.find_vote(review_id, user.id)
        if vote:
            self.reviews.delete(vote)
            review.helpful_count = max(0, review.helpful_count - 1)
        else:
            self.reviews.add(ReviewHelpfulVote(review_id=review_id, user_id=user.id))
            review.helpful_count += 1

        self.db.commit()
        return self._get(review_id)

    def respond(self, review_id: int, user: User, response: str) -> Review:
        """Artisan reply; only the product's artisan, and only once"""
        review = self._get(review_id)

        artisan = self.artisans.find_by_user_id(user.id)
        if not artisan or review.product.artisan_id != artisan.id:
            raise PermissionDeniedError("You can only respond to reviews of your products")

        if review.response_text:
            raise ValidationFailedError("You have already responded to this review")

        review.response_text = response
        review.responded_by = user.id
        review.responded_at = datetime.now(timezone.utc)
        self.db.commit()
        return self._get(review_id)

    def report(self, review_id: int, user: User, reason: str) -> Review:
        review = self._get(review_id)

        if self.reviews.find_report(review_id, user.id):
            raise ValidationFailedError("You have already reported this review")

        self.reviews.add(ReviewReport(review_id=review_id, reported_by=user.id, reason=reason))
        self.db.commit()
        logger.info(f"Review {review_id} reported by user {user.id}")
        return self._get(review.id)

    def moderate(self, review_id: int, data: ReviewModeration) -> Review:
        review = self._get(review_id)

        review.status = data.status
        if data.notes is not None:
            review.admin_notes = data.notes
        self.db.flush()

        self.recompute_product_rating(review.product_id)
        self.db.commit()

        logger.info(f"Review {review_id} {data.status}")
        return self._get(review_id)

    def recompute_product_rating(self, product_id: int):
        product = self.products.find_by_id(product_id)
        if product is None:
            return
        average, count = self.reviews.approved_rating(product_id)
        product.rating_average = round(average, 1)
        product.rating_count = count

    def product_stats(self, product_id: int) -> dict:
        """{average, total, breakdown} over approved reviews"""
        average, count = self.reviews.approved_rating(product_id)
        breakdown = self.reviews.rating_breakdown(product_id)
        return {
            "average": round(average, 1),
            "total": count,
            "breakdown": {str(star): breakdown[star] for star in range(1, 6)},
        }

    def moderation_stats(self) -> dict:
        by_status = self.reviews.count_by_status()
        return {
            "total": sum(by_status.values()),
            "pending": by_status.get("pending", 0),
            "approved": by_status.get("approved", 0),
            "rejected": by_status.get("rejected", 0),
            "reported": self.reviews.count_reported(),
            "average_rating": self.reviews.average_rating(),
        }


def visible_status(status: Optional[str]) -> Optional[str]:
    """Public listings default to approved reviews; 'all' disables the filter"""
    if status == "all":
        return None
    return status or "approved"
