"""
Admin API Endpoints
Marketplace oversight: dashboard, approvals, users, review moderation and
runtime metrics. Every route requires the admin role.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kalakari.core.auth import require_admin
from kalakari.core.database import get_db
from kalakari.core.metrics import metrics
from kalakari.domain.artisan import ApprovalRequest, ArtisanPrivate
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.order import Order as OrderOut
from kalakari.domain.product import Product as ProductOut
from kalakari.domain.review import Review as ReviewOut, ReviewModeration
from kalakari.domain.user import UserOut
from kalakari.models import User
from kalakari.repositories import (
    ArtisanRepository,
    OrderRepository,
    ProductRepository,
    ReviewRepository,
    UserRepository,
)
from kalakari.services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


class UserStatusUpdate(BaseModel):
    is_active: bool


@router.get("/dashboard")
async def dashboard(db: Session = Depends(get_db)):
    users = UserRepository(db)
    artisans = ArtisanRepository(db)
    products = ProductRepository(db)
    orders = OrderRepository(db)

    product_counts = products.count_by_approval()

    return envelope({
        "stats": {
            "total_users": sum(users.count_by_role().values()),
            "total_artisans": artisans.count(),
            "total_products": product_counts["total"],
            "total_orders": orders.count(),
            "pending_artisans": artisans.count(approved=False),
            "pending_products": product_counts["pending"],
            "total_revenue": float(orders.delivered_revenue()),
        },
        "recent_orders": [OrderOut.from_model(o).to_dict() for o in orders.find_recent(limit=10)],
        "top_artisans": [ArtisanPrivate.from_model(a).to_dict() for a in artisans.top_by_sales(limit=5)],
    })


@router.get("/metrics")
async def get_metrics():
    return envelope({"metrics": metrics.snapshot()})


# ----------------------------------------------------------------------------
# Artisans
# ----------------------------------------------------------------------------

@router.get("/artisans")
async def list_artisans(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(pending|approved)$"),
    craft_type: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    artisans, total = ArtisanRepository(db).find_for_admin(
        status=status_filter, craft_type=craft_type, state=state, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "artisans": [ArtisanPrivate.from_model(a).to_dict() for a in artisans],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/artisans/{artisan_id}")
async def get_artisan(artisan_id: int, db: Session = Depends(get_db)):
    artisan = ArtisanRepository(db).find_by_id(artisan_id)
    if not artisan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artisan not found")

    return envelope({
        "artisan": ArtisanPrivate.from_model(artisan).to_dict(),
        "products": ProductRepository(db).count_by_approval(artisan_id=artisan.id),
    })


@router.put("/artisans/{artisan_id}/approve")
async def approve_artisan(artisan_id: int, payload: ApprovalRequest, db: Session = Depends(get_db)):
    """Approval also marks the artisan as verified"""
    artisan = ArtisanRepository(db).find_by_id(artisan_id)
    if not artisan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artisan not found")

    artisan.is_approved = payload.is_approved
    artisan.is_verified = payload.is_approved
    db.commit()
    db.refresh(artisan)

    outcome = "approved" if payload.is_approved else "rejected"
    logger.info(f"Artisan {artisan_id} {outcome}")
    return envelope({"artisan": ArtisanPrivate.from_model(artisan).to_dict()},
                    message=f"Artisan {outcome} successfully")


# ----------------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------------

@router.get("/products")
async def list_products(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|inactive)$"),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    products, total = ProductRepository(db).find_for_admin(
        status=status_filter, category=category, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "products": [ProductOut.from_model(p).to_dict() for p in products],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/products/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db)):
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return envelope({"product": ProductOut.from_model(product).to_dict()})


@router.put("/products/{product_id}/approve")
async def approve_product(product_id: int, payload: ApprovalRequest, db: Session = Depends(get_db)):
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    product.is_approved = payload.is_approved
    db.commit()
    db.refresh(product)

    outcome = "approved" if payload.is_approved else "rejected"
    logger.info(f"Product {product_id} {outcome}")
    return envelope({"product": ProductOut.from_model(product).to_dict()},
                    message=f"Product {outcome} successfully")


# ----------------------------------------------------------------------------
# Orders and users
# ----------------------------------------------------------------------------

@router.get("/orders")
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    orders, total = OrderRepository(db).find_all(status=status_filter, limit=limit, offset=page_offset(page, limit))
    return envelope({
        "orders": [OrderOut.from_model(o).to_dict() for o in orders],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/users")
async def list_users(
    role: Optional[str] = Query(None, pattern="^(customer|artisan|admin)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    users, total = UserRepository(db).find_all(role=role, limit=limit, offset=page_offset(page, limit))
    return envelope({
        "users": [UserOut.model_validate(u).model_dump(mode="json") for u in users],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.put("/users/{user_id}/status")
async def set_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own status")

    user = UserRepository(db).find_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.is_active = payload.is_active
    db.commit()

    outcome = "activated" if payload.is_active else "deactivated"
    logger.info(f"User {user_id} {outcome} by admin {admin.id}")
    return envelope({"user": UserOut.model_validate(user).model_dump(mode="json")},
                    message=f"User {outcome} successfully")


# ----------------------------------------------------------------------------
# Review moderation
# ----------------------------------------------------------------------------

@router.get("/reviews")
async def list_reviews(
    status_filter: Optional[str] = Query("pending", alias="status", pattern="^(pending|approved|rejected)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    reviews, total = ReviewRepository(db).find_all(status=status_filter, limit=limit, offset=page_offset(page, limit))
    return envelope({
        "reviews": [ReviewOut.from_model(r).to_dict() for r in reviews],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/reviews/stats")
async def review_stats(db: Session = Depends(get_db)):
    return envelope({"stats": ReviewService(db).moderation_stats()})


@router.put("/reviews/{review_id}/approve")
async def moderate_review(review_id: int, payload: ReviewModeration, db: Session = Depends(get_db)):
    """Approve or reject; the product's rating is recomputed from approved reviews"""
    review = ReviewService(db).moderate(review_id, payload)
    return envelope({"review": ReviewOut.from_model(review).to_dict()},
                    message=f"Review {payload.status} successfully")
