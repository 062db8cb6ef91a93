"""
Orders API Endpoints
Checkout, order history, artisan fulfilment and customer cancellation
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import get_current_user, require_artisan, require_customer
from kalakari.core.database import get_db
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.order import Order as OrderOut, OrderCancel, OrderCreate, OrderStatusUpdate
from kalakari.models import User
from kalakari.repositories import OrderRepository
from kalakari.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["Orders"])

STATUS_PATTERN = "^(pending|confirmed|processing|shipped|delivered|cancelled|returned)$"


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, user: User = Depends(require_customer), db: Session = Depends(get_db)):
    """
    Place an order

    Stock is reserved immediately; pricing is computed server-side
    (free shipping from 1000, 18% tax).
    """
    order = OrderService(db).create_order(user, payload)
    return envelope({"order": OrderOut.from_model(order).to_dict()}, message="Order created successfully")


@router.get("")
async def my_orders(
    status_filter: Optional[str] = Query(None, alias="status", pattern=STATUS_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    orders, total = OrderRepository(db).find_for_customer(
        user.id, status=status_filter, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "orders": [OrderOut.from_model(o).to_dict() for o in orders],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/artisan/my-orders")
async def artisan_orders(
    status_filter: Optional[str] = Query(None, alias="status", pattern=STATUS_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(require_artisan),
    db: Session = Depends(get_db),
):
    """Orders containing the artisan's products, with only their own lines"""
    artisan, orders, total = OrderService(db).artisan_orders(
        user, status=status_filter, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "orders": [OrderOut.from_model(o, artisan_id=artisan.id).to_dict() for o in orders],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/{order_id}")
async def get_order(order_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    order, artisan_id = OrderService(db).get_order_for_user(order_id, user)
    return envelope({"order": OrderOut.from_model(order, artisan_id=artisan_id).to_dict()})


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    user: User = Depends(require_artisan),
    db: Session = Depends(get_db),
):
    order = OrderService(db).update_status(order_id, user, payload)
    return envelope({"order": OrderOut.from_model(order).to_dict()}, message="Order status updated successfully")


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    payload: Optional[OrderCancel] = None,
    user: User = Depends(require_customer),
    db: Session = Depends(get_db),
):
    reason = payload.reason if payload else None
    order = OrderService(db).cancel_order(order_id, user, reason)
    return envelope({"order": OrderOut.from_model(order).to_dict()}, message="Order cancelled successfully")
