"""
Order Repository - Data Access Layer for Orders

Handles order queries for customers, artisans and admins, plus the
aggregates used by the dashboards.
"""
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from kalakari.models import Order, OrderItem

PURCHASED_STATUSES = ("confirmed", "processing", "shipped", "delivered")


class OrderRepository:
    """
    Repository for Order data access

    Orders are always loaded with their items and status history
    (selectinload avoids N+1 queries on listings).
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Order).options(
            selectinload(Order.items),
            selectinload(Order.status_history),
        )

    def find_by_id(self, order_id: int) -> Optional[Order]:
        return self._query().filter(Order.id == order_id).first()

    def find_by_gateway_order_id(self, gateway_order_id: str) -> Optional[Order]:
        return self._query().filter(Order.gateway_order_id == gateway_order_id).first()

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.query(Order.id).filter(Order.order_number == order_number).first() is not None

    def find_for_customer(
        self,
        customer_id: int,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        query = self._query().filter(Order.customer_id == customer_id)
        if status:
            query = query.filter(Order.status == status)

        total = query.count()
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
        return orders, total

    def find_for_artisan(
        self,
        artisan_id: int,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        """Orders containing at least one line sold by the artisan"""
        query = self._query().filter(Order.items.any(OrderItem.artisan_id == artisan_id))
        if status:
            query = query.filter(Order.status == status)

        total = query.count()
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
        return orders, total

    def find_all(
        self,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Order], int]:
        query = self._query()
        if status:
            query = query.filter(Order.status == status)

        total = query.count()
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit).all()
        return orders, total

    def find_recent(self, limit: int = 5) -> List[Order]:
        return self._query().order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()

    def has_delivered_purchase(self, customer_id: int, product_id: int) -> bool:
        """True when the customer has a delivered order containing the product"""
        return (
            self.db.query(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .filter(
                Order.customer_id == customer_id,
                Order.status == "delivered",
                OrderItem.product_id == product_id,
            )
            .first()
            is not None
        )

    def has_purchased(self, customer_id: int, product_id: int) -> bool:
        """True when a paid-for order (confirmed onwards, not cancelled) contains the product"""
        return (
            self.db.query(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .filter(
                Order.customer_id == customer_id,
                Order.status.in_(PURCHASED_STATUSES),
                OrderItem.product_id == product_id,
            )
            .first()
            is not None
        )

    def product_has_orders(self, product_id: int) -> bool:
        return self.db.query(OrderItem.id).filter(OrderItem.product_id == product_id).first() is not None

    def count(self) -> int:
        return self.db.query(func.count(Order.id)).scalar() or 0

    def count_by_status(self, artisan_id: Optional[int] = None) -> Dict[str, int]:
        query = self.db.query(Order.status, func.count(func.distinct(Order.id)))
        if artisan_id is not None:
            query = query.join(OrderItem, OrderItem.order_id == Order.id).filter(OrderItem.artisan_id == artisan_id)
        return {status: count for status, count in query.group_by(Order.status).all()}

    def delivered_revenue(self) -> Decimal:
        revenue = self.db.query(func.sum(Order.total)).filter(Order.status == "delivered").scalar()
        return Decimal(revenue or 0)

    def artisan_delivered_revenue(self, artisan_id: int) -> Decimal:
        revenue = (
            self.db.query(func.sum(OrderItem.unit_price * OrderItem.quantity))
            .join(Order, Order.id == OrderItem.order_id)
            .filter(OrderItem.artisan_id == artisan_id, Order.status == "delivered")
            .scalar()
        )
        return Decimal(revenue or 0)

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order
