"""
Reviews API Endpoints
Product reviews, helpful votes, artisan responses and abuse reports
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import get_current_user, get_current_user_optional, require_artisan, require_customer
from kalakari.core.database import get_db
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.review import Review as ReviewOut, ReviewCreate, ReviewReportRequest, ReviewResponse
from kalakari.models import User
from kalakari.repositories import ProductRepository, ReviewRepository
from kalakari.services.review_service import ReviewService, visible_status

router = APIRouter(prefix="/api", tags=["Reviews"])


@router.get("/products/{product_id}/reviews")
async def product_reviews(
    product_id: int,
    rating: Optional[int] = Query(None, ge=1, le=5),
    sort: str = Query("newest", pattern="^(newest|oldest|rating|helpful)$"),
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|rejected|all)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Approved reviews for a product with rating stats

    Only admins may list other statuses.
    """
    if not ProductRepository(db).find_by_id(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    review_status = visible_status(status_filter) if user is not None and user.role == "admin" else "approved"

    reviews, total = ReviewRepository(db).find_for_product(
        product_id,
        status=review_status,
        rating=rating,
        sort=sort,
        limit=limit,
        offset=page_offset(page, limit),
    )

    pagination = Pagination.build(page, limit, total).model_dump()
    pagination["hasMore"] = page * limit < total

    return envelope({
        "reviews": [ReviewOut.from_model(r).to_dict() for r in reviews],
        "pagination": pagination,
        "stats": ReviewService(db).product_stats(product_id),
    })


@router.post("/products/{product_id}/reviews", status_code=status.HTTP_201_CREATED)
async def create_review(
    product_id: int,
    payload: ReviewCreate,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    review = ReviewService(db).create_review(product_id, user, payload)
    return envelope(
        {"review": ReviewOut.from_model(review).to_dict()},
        message="Review submitted successfully and is pending approval",
    )


@router.post("/reviews/{review_id}/helpful")
async def toggle_helpful(review_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    review = ReviewService(db).toggle_helpful(review_id, user)
    return envelope({"helpful_count": review.helpful_count}, message="Helpful vote updated")


@router.post("/reviews/{review_id}/respond")
async def respond_to_review(
    review_id: int,
    payload: ReviewResponse,
    user: User = Depends(require_artisan),
    db: Session = Depends(get_db),
):
    review = ReviewService(db).respond(review_id, user, payload.response)
    return envelope({"review": ReviewOut.from_model(review).to_dict()}, message="Response added successfully")


@router.post("/reviews/{review_id}/report")
async def report_review(
    review_id: int,
    payload: ReviewReportRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ReviewService(db).report(review_id, user, payload.reason)
    return envelope(message="Review reported successfully")
