"""
Development endpoints backed by in-memory fixtures

Mounted under /api/dev only when dev endpoints are enabled and the
environment is not production.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from kalakari.core.auth import create_access_token
from kalakari.dev import fixtures
from kalakari.domain.common import Pagination, envelope, page_offset

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dev", tags=["Development"])


class MockLoginRequest(BaseModel):
    email: str
    password: str


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def _product_out(product: dict) -> dict:
    artisan = fixtures.get_artisan(product["artisan_id"])
    return {
        **product,
        "price": _money(product["price"]),
        "original_price": _money(product["original_price"]),
        "in_stock": product["inventory_available"] > 0,
        "artisan": {
            "id": artisan["id"],
            "business_name": artisan["business_name"],
            "state": artisan["state"],
        },
    }


def _order_out(order: dict) -> dict:
    return {
        **order,
        "items": [{**item, "unit_price": _money(item["unit_price"])} for item in order["items"]],
        "pricing": {key: _money(value) for key, value in order["pricing"].items()},
        "created_at": order["created_at"].isoformat(),
    }


@router.get("/products")
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
):
    products = fixtures.PRODUCTS
    if category:
        products = [p for p in products if p["category"] == category]
    if search:
        term = search.lower()
        products = [p for p in products if term in p["name"].lower() or term in p["description"].lower()]
    if min_price is not None:
        products = [p for p in products if p["price"] >= min_price]
    if max_price is not None:
        products = [p for p in products if p["price"] <= max_price]

    offset = page_offset(page, limit)
    return envelope({
        "products": [_product_out(p) for p in products[offset:offset + limit]],
        "pagination": Pagination.build(page, limit, len(products)).model_dump(),
    })


@router.get("/products/{product_id}")
async def get_product(product_id: int):
    product = fixtures.get_product(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return envelope({"product": _product_out(product)})


@router.get("/artisans")
async def list_artisans():
    return envelope({"artisans": fixtures.ARTISANS})


@router.post("/auth/login")
async def mock_login(payload: MockLoginRequest):
    """Signed token for a fixture user; every fixture account shares one password"""
    user = fixtures.get_user_by_email(payload.email)
    if not user or payload.password != fixtures.MOCK_PASSWORD:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info(f"Mock login for {user['email']}")
    return envelope({"user": user, "token": create_access_token(user["id"], user["role"], fixture=True)},
                    message="Login successful")


@router.get("/users/{user_id}/orders")
async def user_orders(user_id: int):
    if not fixtures.get_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    orders = [o for o in fixtures.ORDERS if o["customer_id"] == user_id]
    return envelope({"orders": [_order_out(o) for o in orders]})
