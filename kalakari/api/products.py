"""
Products API Endpoints
Public catalog browsing and artisan listing management
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import require_artisan
from kalakari.core.database import get_db
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.product import Product as ProductOut, ProductCreate, ProductUpdate, derive_discount
from kalakari.models import Artisan, Product, User
from kalakari.repositories import ArtisanRepository, OrderRepository, ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


def _split(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return parts or None


def _my_artisan(db: Session, user: User) -> Artisan:
    artisan = ArtisanRepository(db).find_by_user_id(user.id)
    if not artisan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artisan profile not found")
    return artisan


def _my_product(db: Session, user: User, product_id: int) -> Product:
    artisan = _my_artisan(db, user)
    product = ProductRepository(db).find_by_id(product_id)
    if not product or product.artisan_id != artisan.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.get("")
async def list_products(
    category: Optional[str] = Query(None),
    artisan_id: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, max_length=100, description="Matches name, description or tags"),
    state: Optional[str] = Query(None, description="Artisan's state"),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    materials: Optional[str] = Query(None, description="Comma-separated, any match"),
    colors: Optional[str] = Query(None, description="Comma-separated, any match"),
    in_stock: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    sort: str = Query("created_at", pattern="^(created_at|price|rating|name|popularity)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    """
    Public catalog: active and approved products only

    Returns products plus pagination {current, pages, total}
    """
    products, total = ProductRepository(db).find_all(
        category=category,
        artisan_id=artisan_id,
        min_price=min_price,
        max_price=max_price,
        search=search.strip() if search else None,
        state=state,
        min_rating=min_rating,
        materials=_split(materials),
        colors=_split(colors),
        in_stock=in_stock,
        featured=featured,
        sort=sort,
        order=order,
        limit=limit,
        offset=page_offset(page, limit),
    )

    return envelope({
        "products": [ProductOut.from_model(p).to_dict() for p in products],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/featured")
async def featured_products(limit: int = Query(8, ge=1, le=50), db: Session = Depends(get_db)):
    products = ProductRepository(db).find_featured(limit=limit)
    return envelope({"products": [ProductOut.from_model(p).to_dict() for p in products]})


@router.get("/category/{category}")
async def products_by_category(
    category: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    products, total = ProductRepository(db).find_all(category=category, limit=limit, offset=page_offset(page, limit))
    return envelope({
        "products": [ProductOut.from_model(p).to_dict() for p in products],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/artisan/my-products")
async def my_products(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|pending|inactive)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    user: User = Depends(require_artisan),
    db: Session = Depends(get_db),
):
    artisan = _my_artisan(db, user)
    products, total = ProductRepository(db).find_by_artisan(
        artisan.id, status=status_filter, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "products": [ProductOut.from_model(p, include_artisan=False).to_dict() for p in products],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    product = repo.find_public_by_id(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    repo.increment_views(product.id)
    db.commit()

    return envelope({"product": ProductOut.from_model(repo.find_public_by_id(product_id)).to_dict()})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreate, user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    """New listings start unapproved and wait for admin review"""
    artisan = _my_artisan(db, user)
    if not artisan.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Artisan profile must be approved to add products",
        )

    data = payload.model_dump(exclude={"inventory"})
    product = Product(
        artisan_id=artisan.id,
        discount=derive_discount(payload.price, payload.original_price),
        inventory_total=payload.inventory.total,
        inventory_available=payload.inventory.available,
        inventory_reserved=0,
        is_approved=False,
        **data,
    )
    ProductRepository(db).add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"Product {product.id} created by artisan {artisan.id}")
    return envelope({"product": ProductOut.from_model(product).to_dict()}, message="Product created successfully")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    user: User = Depends(require_artisan),
    db: Session = Depends(get_db),
):
    product = _my_product(db, user, product_id)

    changes = payload.model_dump(exclude_unset=True, exclude={"inventory"})
    for field, value in changes.items():
        setattr(product, field, value)

    if payload.inventory is not None:
        # Reserved units belong to open orders and must still fit in the total
        if payload.inventory.available + product.inventory_reserved > payload.inventory.total:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Available plus reserved inventory cannot exceed total inventory",
            )
        product.inventory_total = payload.inventory.total
        product.inventory_available = payload.inventory.available

    if "price" in changes or "original_price" in changes:
        product.discount = derive_discount(product.price, product.original_price)

    db.commit()
    db.refresh(product)
    return envelope({"product": ProductOut.from_model(product).to_dict()}, message="Product updated successfully")


@router.delete("/{product_id}")
async def delete_product(product_id: int, user: User = Depends(require_artisan), db: Session = Depends(get_db)):
    """Products that appear in orders are deactivated instead of deleted"""
    product = _my_product(db, user, product_id)

    if OrderRepository(db).product_has_orders(product.id):
        product.is_active = False
    else:
        ProductRepository(db).delete(product)

    db.commit()
    return envelope(message="Product deleted successfully")
