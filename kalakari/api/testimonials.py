"""
Testimonials API Endpoints
Customers vouch for products they bought; admins approve before anything is public.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import get_current_user, require_admin, require_customer
from kalakari.core.database import get_db
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.testimonial import (
    Testimonial as TestimonialOut, TestimonialCreate, TestimonialModeration, TestimonialUpdate,
)
from kalakari.models import Testimonial, User
from kalakari.models.base import utcnow
from kalakari.repositories import OrderRepository, ProductRepository, TestimonialRepository

router = APIRouter(prefix="/api/testimonials", tags=["Testimonials"])


def _own_testimonial(repo: TestimonialRepository, testimonial_id: int, user: User) -> Testimonial:
    testimonial = repo.find_by_id(testimonial_id)
    if not testimonial or testimonial.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    return testimonial


@router.get("")
async def list_testimonials(
    featured: Optional[bool] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    items, total = TestimonialRepository(db).find_approved(
        featured=featured, rating=rating, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "testimonials": [TestimonialOut.from_model(t).to_dict() for t in items],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/admin/all")
async def list_all_testimonials(
    approved: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Moderation queue; pass approved=false for the pending ones"""
    items, total = TestimonialRepository(db).find_all(
        approved=approved, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "testimonials": [TestimonialOut.from_model(t).to_dict() for t in items],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/{testimonial_id}")
async def get_testimonial(testimonial_id: int, db: Session = Depends(get_db)):
    testimonial = TestimonialRepository(db).find_by_id(testimonial_id)
    if not testimonial or not testimonial.is_approved:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    return envelope({"testimonial": TestimonialOut.from_model(testimonial).to_dict()})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_testimonial(
    payload: TestimonialCreate,
    customer: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    if not ProductRepository(db).find_by_id(payload.product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    repo = TestimonialRepository(db)
    if repo.find_by_product_and_user(payload.product_id, customer.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You have already submitted a testimonial for this product",
        )
    if not OrderRepository(db).has_purchased(customer.id, payload.product_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You can only submit testimonials for products you have purchased",
        )

    testimonial = repo.add(Testimonial(user_id=customer.id, is_approved=False, **payload.model_dump()))
    db.commit()

    return envelope(
        {"testimonial": TestimonialOut.from_model(repo.find_by_id(testimonial.id)).to_dict()},
        message="Testimonial submitted successfully. It will be reviewed and published soon.",
    )


@router.put("/{testimonial_id}")
async def update_testimonial(
    testimonial_id: int,
    payload: TestimonialUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    testimonial = _own_testimonial(TestimonialRepository(db), testimonial_id, user)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(testimonial, field, value)
    # Edited content goes back through moderation
    testimonial.is_approved = False
    testimonial.approved_by = None
    testimonial.approved_at = None

    db.commit()
    db.refresh(testimonial)
    return envelope(
        {"testimonial": TestimonialOut.from_model(testimonial).to_dict()},
        message="Testimonial updated successfully. It will be reviewed again.",
    )


@router.delete("/{testimonial_id}")
async def delete_testimonial(
    testimonial_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = TestimonialRepository(db)
    repo.delete(_own_testimonial(repo, testimonial_id, user))
    db.commit()
    return envelope(message="Testimonial deleted successfully")


@router.put("/{testimonial_id}/approve")
async def moderate_testimonial(
    testimonial_id: int,
    payload: TestimonialModeration,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    testimonial = TestimonialRepository(db).find_by_id(testimonial_id)
    if not testimonial:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")

    testimonial.is_approved = payload.is_approved
    testimonial.is_featured = payload.is_featured and payload.is_approved
    if payload.admin_notes is not None:
        testimonial.admin_notes = payload.admin_notes
    if payload.is_approved:
        testimonial.approved_by = admin.id
        testimonial.approved_at = utcnow()
    else:
        testimonial.approved_by = None
        testimonial.approved_at = None

    db.commit()
    db.refresh(testimonial)
    return envelope(
        {"testimonial": TestimonialOut.from_model(testimonial).to_dict()},
        message="Testimonial status updated successfully",
    )
