"""
Artisans API Endpoints
Public artisan directory and artisan self-service (profile, bank details, dashboard)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import require_artisan
from kalakari.core.database import get_db
from kalakari.domain.artisan import ArtisanCreate, ArtisanPrivate, ArtisanPublic, ArtisanUpdate, BankDetails
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.product import Product as ProductOut
from kalakari.models import Artisan, User
from kalakari.repositories import ArtisanRepository, OrderRepository, ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/artisans", tags=["Artisans"])

OPEN_STATUSES = ("confirmed", "processing", "shipped")


def _my_profile(db: Session, user: User) -> Artisan:
    artisan = ArtisanRepository(db).find_by_user_id(user.id)
    if not artisan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artisan profile not found")
    return artisan


@router.get("")
async def list_artisans(
    craft_type: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Approved and verified artisans"""
    artisans, total = ArtisanRepository(db).find_public(
        craft_type=craft_type, state=state, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "artisans": [ArtisanPublic.from_model(a).to_dict() for a in artisans],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.post("/profile", status_code=status.HTTP_201_CREATED)
async def create_profile(payload: ArtisanCreate, user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    """One profile per artisan account; it starts unapproved"""
    repo = ArtisanRepository(db)
    if repo.find_by_user_id(user.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Artisan profile already exists")

    data = payload.model_dump()
    artisan = Artisan(user_id=user.id, is_approved=False, is_verified=False, **data)
    repo.add(artisan)
    db.commit()

    logger.info(f"Artisan profile {artisan.id} created for user {user.id}")
    return envelope(
        {"artisan": ArtisanPrivate.from_model(repo.find_by_id(artisan.id)).to_dict()},
        message="Artisan profile created successfully",
    )


@router.get("/profile")
async def get_profile(user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    return envelope({"artisan": ArtisanPrivate.from_model(_my_profile(db, user)).to_dict()})


@router.put("/profile")
async def update_profile(payload: ArtisanUpdate, user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    artisan = _my_profile(db, user)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(artisan, field, value)

    db.commit()
    db.refresh(artisan)
    return envelope({"artisan": ArtisanPrivate.from_model(artisan).to_dict()}, message="Profile updated successfully")


@router.put("/bank-details")
async def update_bank_details(payload: BankDetails, user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    artisan = _my_profile(db, user)
    artisan.bank_details = payload.model_dump()
    db.commit()
    return envelope(message="Bank details updated successfully")


@router.get("/dashboard/stats")
async def dashboard_stats(user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    """Product, order and revenue figures for the artisan's dashboard"""
    artisan = _my_profile(db, user)
    products = ProductRepository(db)
    orders = OrderRepository(db)

    by_status = orders.count_by_status(artisan_id=artisan.id)
    recent, _ = products.find_by_artisan(artisan.id, limit=5)

    return envelope({
        "stats": {
            "products": products.count_by_approval(artisan_id=artisan.id),
            "orders": {
                "total": sum(by_status.values()),
                "completed": by_status.get("delivered", 0),
                "pending": sum(by_status.get(s, 0) for s in OPEN_STATUSES),
                "by_status": by_status,
            },
            "revenue": {
                "total": float(orders.artisan_delivered_revenue(artisan.id)),
            },
            "rating": {"average": artisan.rating_average, "count": artisan.rating_count},
        },
        "recent_products": [
            {
                "id": p.id,
                "name": p.name,
                "price": float(p.price),
                "is_approved": p.is_approved,
                "created_at": p.created_at.isoformat() if p.created_at else None,
            }
            for p in recent
        ],
    })


@router.get("/{artisan_id}")
async def get_artisan(artisan_id: int, db: Session = Depends(get_db)):
    """Public profile of an approved artisan with their live products"""
    artisan = ArtisanRepository(db).find_by_id(artisan_id)
    if not artisan or not artisan.is_approved:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artisan not found")

    products, _ = ProductRepository(db).find_all(artisan_id=artisan.id, limit=12)
    return envelope({
        "artisan": ArtisanPublic.from_model(artisan).to_dict(),
        "products": [ProductOut.from_model(p, include_artisan=False).to_dict() for p in products],
    })
