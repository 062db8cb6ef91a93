"""
Shopping cart

Lines are keyed by product + variant; adding the same product and variant
again increases the quantity of the existing line.
"""
from decimal import Decimal

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kalakari.core.auth import get_current_user
from kalakari.core.database import get_db
from kalakari.domain.cart import CartAdd, CartRemove, CartUpdate, variant_key
from kalakari.domain.common import envelope
from kalakari.models import CartItem, User
from kalakari.repositories import CartRepository, ProductRepository

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def _cart_payload(repo: CartRepository, user: User) -> dict:
    items = []
    subtotal = Decimal("0")
    for line in repo.items_for(user.id):
        product = line.product
        line_total = Decimal(product.price) * line.quantity
        subtotal += line_total
        items.append({
            "product_id": product.id,
            "quantity": line.quantity,
            "variant": line.variant or None,
            "added_at": line.added_at.isoformat() if line.added_at else None,
            "line_total": float(line_total),
            "product": {
                "id": product.id,
                "name": product.name,
                "price": float(product.price),
                "images": product.images or [],
                "available": product.inventory_available,
                "is_active": product.is_active and product.is_approved,
            },
        })

    return {
        "items": items,
        "total_items": sum(item["quantity"] for item in items),
        "subtotal": float(subtotal),
    }


@router.get("")
async def get_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"cart": _cart_payload(CartRepository(db), user)})


@router.post("")
async def add_to_cart(payload: CartAdd, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    product = ProductRepository(db).find_by_id(payload.product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    repo = CartRepository(db)
    key = variant_key(payload.variant)
    line = repo.find_line(user.id, payload.product_id, key)
    if line:
        line.quantity += payload.quantity
    else:
        repo.add(CartItem(
            user_id=user.id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            variant=payload.variant or {},
            variant_key=key,
        ))

    db.commit()
    return envelope({"cart": _cart_payload(repo, user)}, message="Item added to cart")


@router.put("/{product_id}")
async def update_cart_item(
    product_id: int,
    payload: CartUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set a line's quantity; zero or less removes the line"""
    repo = CartRepository(db)
    key = variant_key(payload.variant) if payload.variant is not None else None
    line = repo.find_line(user.id, product_id, key)
    if not line:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")

    if payload.quantity <= 0:
        repo.remove(line)
    else:
        line.quantity = payload.quantity

    db.commit()
    return envelope({"cart": _cart_payload(repo, user)}, message="Cart updated")


@router.delete("/{product_id}")
async def remove_from_cart(
    product_id: int,
    payload: CartRemove = Body(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = CartRepository(db)
    key = variant_key(payload.variant) if payload and payload.variant is not None else None
    line = repo.find_line(user.id, product_id, key)
    if not line:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found in cart")

    repo.remove(line)
    db.commit()
    return envelope({"cart": _cart_payload(repo, user)}, message="Item removed from cart")


@router.delete("")
async def clear_cart(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    CartRepository(db).clear(user.id)
    db.commit()
    return envelope({"cart": {"items": [], "total_items": 0, "subtotal": 0.0}}, message="Cart cleared")
