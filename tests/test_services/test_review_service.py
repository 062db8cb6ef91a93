"""
Unit tests for ReviewService
"""
import pytest

from kalakari.core.errors import PermissionDeniedError, ValidationFailedError
from kalakari.domain.review import ReviewCreate, ReviewModeration
from kalakari.services.review_service import ReviewService, visible_status


def _review(rating: int = 5) -> ReviewCreate:
    return ReviewCreate(rating=rating, title="Lovely", comment="Beautiful finish and quick delivery")


class TestReviewService:

    def test_new_review_is_pending_and_unverified(self, db, customer, make_product):
        product = make_product()

        review = ReviewService(db).create_review(product.id, customer, _review())

        assert review.status == "pending"
        assert review.is_verified is False

    def test_one_review_per_product(self, db, customer, make_product):
        product = make_product()
        service = ReviewService(db)
        service.create_review(product.id, customer, _review())

        with pytest.raises(ValidationFailedError, match="already reviewed"):
            service.create_review(product.id, customer, _review())

    def test_rating_counts_only_approved_reviews(self, db, make_user, make_product):
        product = make_product()
        service = ReviewService(db)
        first = service.create_review(product.id, make_user(), _review(5))
        second = service.create_review(product.id, make_user(), _review(2))
        third = service.create_review(product.id, make_user(), _review(4))

        service.moderate(first.id, ReviewModeration(status="approved"))
        service.moderate(second.id, ReviewModeration(status="approved"))
        service.moderate(third.id, ReviewModeration(status="rejected"))

        db.refresh(product)
        assert product.rating_count == 2
        assert product.rating_average == 3.5

        stats = service.product_stats(product.id)
        assert stats["total"] == 2
        assert stats["breakdown"]["5"] == 1
        assert stats["breakdown"]["4"] == 0

    def test_unapproving_recomputes(self, db, customer, make_product):
        product = make_product()
        service = ReviewService(db)
        review = service.create_review(product.id, customer, _review(5))
        service.moderate(review.id, ReviewModeration(status="approved"))

        service.moderate(review.id, ReviewModeration(status="rejected"))

        db.refresh(product)
        assert (product.rating_average, product.rating_count) == (0, 0)

    def test_helpful_vote_toggles(self, db, customer, make_user, make_product):
        product = make_product()
        service = ReviewService(db)
        review = service.create_review(product.id, customer, _review())
        voter = make_user()

        assert service.toggle_helpful(review.id, voter).helpful_count == 1
        assert service.toggle_helpful(review.id, voter).helpful_count == 0

    def test_only_products_artisan_may_respond_once(self, db, customer, make_artisan, make_product):
        product = make_product()
        service = ReviewService(db)
        review = service.create_review(product.id, customer, _review())

        with pytest.raises(PermissionDeniedError):
            service.respond(review.id, make_artisan().user, "Thanks!")

        replied = service.respond(review.id, product.artisan.user, "Thank you for the kind words")
        assert replied.response_text == "Thank you for the kind words"

        with pytest.raises(ValidationFailedError, match="already responded"):
            service.respond(review.id, product.artisan.user, "Again")

    def test_report_once_per_user(self, db, customer, make_user, make_product):
        product = make_product()
        service = ReviewService(db)
        review = service.create_review(product.id, customer, _review())
        reporter = make_user()

        service.report(review.id, reporter, "Spam")

        with pytest.raises(ValidationFailedError, match="already reported"):
            service.report(review.id, reporter, "Spam")
        assert service.moderation_stats()["reported"] == 1

    def test_visible_status(self):
        assert visible_status(None) == "approved"
        assert visible_status("all") is None
        assert visible_status("pending") == "pending"
