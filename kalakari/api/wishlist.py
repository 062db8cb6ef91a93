"""
Wishlist (customers only)
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import require_customer
from kalakari.core.database import get_db
from kalakari.domain.cart import WishlistAdd
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.product import Product as ProductOut
from kalakari.models import User, WishlistItem
from kalakari.repositories import ProductRepository, WishlistRepository

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])


@router.get("")
async def get_wishlist(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    items, total = WishlistRepository(db).find_for_customer(user.id, limit=limit, offset=page_offset(page, limit))
    return envelope({
        "items": [
            {
                "product_id": item.product_id,
                "added_at": item.created_at.isoformat() if item.created_at else None,
                "product": ProductOut.from_model(item.product).to_dict(),
            }
            for item in items
        ],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(payload: WishlistAdd, user: User = Depends(require_customer), db: Session = Depends(get_db)):
    if not ProductRepository(db).find_by_id(payload.product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    repo = WishlistRepository(db)
    if repo.find(user.id, payload.product_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product already in wishlist")

    repo.add(WishlistItem(customer_id=user.id, product_id=payload.product_id))
    db.commit()
    return envelope({"product_id": payload.product_id}, message="Product added to wishlist")


@router.get("/check/{product_id}")
async def check_wishlist(product_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)):
    in_wishlist = WishlistRepository(db).find(user.id, product_id) is not None
    return envelope({"in_wishlist": in_wishlist})


@router.delete("/{product_id}")
async def remove_from_wishlist(product_id: int, user: User = Depends(require_customer), db: Session = Depends(get_db)):
    repo = WishlistRepository(db)
    item = repo.find(user.id, product_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in wishlist")

    repo.remove(item)
    db.commit()
    return envelope(message="Product removed from wishlist")


@router.delete("")
async def clear_wishlist(user: User = Depends(require_customer), db: Session = Depends(get_db)):
    removed = WishlistRepository(db).clear(user.id)
    db.commit()
    return envelope({"removed": removed}, message="Wishlist cleared")
