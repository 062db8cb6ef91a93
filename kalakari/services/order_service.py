"""
Order Service
Checkout, order lifecycle and the inventory accounting that follows it

Inventory moves with the order's `inventory_state`:
    reserved  -> sold      (payment confirmed, or COD order delivered)
    reserved  -> released  (order cancelled or payment failed)
    sold      -> released  (paid order cancelled: units go back to stock)
Every transition checks the current state first, so repeating an event never
moves stock twice.
"""
import logging
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from kalakari.core.errors import (
    InsufficientInventoryError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from kalakari.domain.order import STATUS_FLOW, OrderCreate, OrderStatusUpdate
from kalakari.models import Artisan, Order, OrderItem, OrderStatusHistory, User
from kalakari.repositories import ArtisanRepository, CartRepository, OrderRepository, ProductRepository

logger = logging.getLogger(__name__)

FREE_SHIPPING_THRESHOLD = Decimal("1000")
SHIPPING_FEE = Decimal("50")
TAX_RATE = Decimal("0.18")
DELIVERY_WINDOW_DAYS = 7

NON_CANCELLABLE = ("shipped", "delivered", "cancelled", "returned")


def calculate_pricing(subtotal: Decimal) -> Dict[str, Decimal]:
    """
    Order totals from the item subtotal

    shipping: free from 1000 upwards, otherwise 50
    tax: 18% of the subtotal, rounded to whole rupees (half up)
    """
    subtotal = Decimal(subtotal)
    shipping = Decimal("0") if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
    tax = (subtotal * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return {
        "subtotal": subtotal,
        "shipping": shipping,
        "tax": tax,
        "discount": Decimal("0"),
        "total": subtotal + shipping + tax,
    }


def generate_order_number(now: Optional[datetime] = None) -> str:
    """ORD + yyyymmdd + 4 random digits"""
    now = now or datetime.now(timezone.utc)
    return f"ORD{now:%Y%m%d}{random.randint(0, 9999):04d}"


class OrderService:
    """
    Service for order placement and lifecycle

    Owns the transaction: every public method commits on success and rolls
    back on failure.
    """

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.artisans = ArtisanRepository(db)
        self.cart = CartRepository(db)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def _requested_lines(self, customer: User, data: OrderCreate) -> List[Tuple[int, int, Optional[dict]]]:
        if data.items:
            return [(item.product_id, item.quantity, item.variant) for item in data.items]

        cart_items = self.cart.items_for(customer.id)
        if not cart_items:
            raise ValidationFailedError("Cart is empty")
        return [(item.product_id, item.quantity, item.variant or None) for item in cart_items]

    def _unique_order_number(self) -> str:
        for _ in range(10):
            number = generate_order_number()
            if not self.orders.order_number_exists(number):
                return number
        raise ValidationFailedError("Could not allocate an order number, please retry")

    def create_order(self, customer: User, data: OrderCreate) -> Order:
        """
        Place an order and reserve its stock

        Raises:
            ValidationFailedError: product missing, inactive or unapproved; empty cart
            InsufficientInventoryError: not enough available units
        """
        try:
            lines = self._requested_lines(customer, data)

            items = []
            subtotal = Decimal("0")
            for product_id, quantity, variant in lines:
                product = self.products.find_by_id(product_id)
                if not product or not product.is_active or not product.is_approved:
                    raise ValidationFailedError(f"Product {product_id} is not available")

                if product.inventory_available < quantity:
                    raise InsufficientInventoryError(f"Insufficient inventory for product {product.name}")

                # Conditional update: fails if a concurrent order took the stock first
                if not self.products.reserve(product.id, quantity):
                    raise InsufficientInventoryError(f"Insufficient inventory for product {product.name}")

                unit_price = Decimal(product.price)
                subtotal += unit_price * quantity
                items.append(OrderItem(
                    product_id=product.id,
                    artisan_id=product.artisan_id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=unit_price,
                    variant=variant or {},
                ))

            pricing = calculate_pricing(subtotal)
            shipping_address = data.shipping_address.model_dump()
            billing_address = data.billing_address.model_dump() if data.billing_address else shipping_address

            order = Order(
                order_number=self._unique_order_number(),
                customer_id=customer.id,
                items=items,
                shipping_address=shipping_address,
                billing_address=billing_address,
                subtotal=pricing["subtotal"],
                shipping_cost=pricing["shipping"],
                tax_amount=pricing["tax"],
                discount_amount=pricing["discount"],
                total=pricing["total"],
                payment_method=data.payment_method,
                payment_status="pending",
                status="pending",
                inventory_state="reserved",
                customer_notes=data.notes,
            )
            order.status_history.append(
                OrderStatusHistory(status="pending", comment="Order placed", updated_by=customer.id)
            )
            self.orders.add(order)

            if not data.items:
                self.cart.clear(customer.id)

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} placed by user {customer.id}: total {pricing['total']}")
        return self.orders.find_by_id(order.id)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def _get(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _artisan_for(self, user: User) -> Artisan:
        artisan = self.artisans.find_by_user_id(user.id)
        if not artisan:
            raise NotFoundError("Artisan profile not found")
        return artisan

    def get_order_for_user(self, order_id: int, user: User) -> Tuple[Order, Optional[int]]:
        """
        Order visible to the caller

        Returns:
            (order, artisan_id) where artisan_id is set when the caller sees
            the order as a seller (only their lines should be shown)
        """
        order = self._get(order_id)

        if user.role == "admin" or order.customer_id == user.id:
            return order, None

        if user.role == "artisan":
            artisan = self.artisans.find_by_user_id(user.id)
            if artisan and any(item.artisan_id == artisan.id for item in order.items):
                return order, artisan.id

        raise PermissionDeniedError("Access denied")

    def artisan_orders(self, user: User, status: Optional[str], limit: int, offset: int):
        artisan = self._artisan_for(user)
        orders, total = self.orders.find_for_artisan(artisan.id, status=status, limit=limit, offset=offset)
        return artisan, orders, total

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def update_status(self, order_id: int, user: User, data: OrderStatusUpdate) -> Order:
        """
        Move an order forward through pending -> confirmed -> processing -> shipped -> delivered

        Only an artisan with lines in the order may do this.
        """
        try:
            artisan = self._artisan_for(user)
            order = self._get(order_id)

            if not any(item.artisan_id == artisan.id for item in order.items):
                raise PermissionDeniedError("You do not have permission to update this order")

            if order.status not in STATUS_FLOW:
                raise ValidationFailedError(f"Cannot update a {order.status} order")

            if STATUS_FLOW.index(data.status) <= STATUS_FLOW.index(order.status):
                raise ValidationFailedError(f"Invalid status transition from {order.status} to {data.status}")

            now = datetime.now(timezone.utc)
            order.status = data.status
            if data.tracking_number:
                order.tracking_number = data.tracking_number
            if data.carrier:
                order.carrier = data.carrier
            if data.status == "shipped":
                order.estimated_delivery = now + timedelta(days=DELIVERY_WINDOW_DAYS)

            order.status_history.append(OrderStatusHistory(
                status=data.status,
                comment=data.note or f"Order status updated to {data.status}",
                updated_by=user.id,
            ))

            if data.status == "delivered":
                self._mark_delivered(order, now)

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} moved to {data.status} by user {user.id}")
        return self._get(order_id)

    def _mark_delivered(self, order: Order, now: datetime):
        order.delivered_at = now

        if order.payment_method == "cod" and order.payment_status == "pending":
            order.payment_status = "completed"
            order.paid_at = now

        self.commit_inventory(order)

        for item in order.items:
            self.products.increment_orders(item.product_id, 1)
            artisan = self.db.get(Artisan, item.artisan_id)
            if artisan is not None:
                artisan.total_sales = Decimal(artisan.total_sales or 0) + Decimal(item.line_total)

    def cancel_order(self, order_id: int, user: User, reason: Optional[str] = None) -> Order:
        try:
            order = self._get(order_id)

            if order.customer_id != user.id:
                raise PermissionDeniedError("Access denied")

            if order.status in NON_CANCELLABLE:
                raise ValidationFailedError("Order cannot be cancelled")

            was_paid = order.payment_status == "completed" and order.payment_method != "cod"

            order.status = "cancelled"
            order.cancellation_reason = reason or "Order cancelled by customer"
            order.cancelled_by = user.id
            order.cancelled_at = datetime.now(timezone.utc)
            order.refund_status = "pending" if was_paid else "completed"
            order.status_history.append(OrderStatusHistory(
                status="cancelled",
                comment=order.cancellation_reason,
                updated_by=user.id,
            ))

            self.release_inventory(order)
            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} cancelled by user {user.id}")
        return self._get(order_id)

    # ------------------------------------------------------------------
    # Inventory transitions (no commit; callers own the transaction)
    # ------------------------------------------------------------------

    def commit_inventory(self, order: Order):
        """reserved -> sold"""
        if order.inventory_state != "reserved":
            return

        for item in order.items:
            if not self.products.commit_sale(item.product_id, item.quantity):
                logger.error(f"Order {order.order_number}: reserved stock missing for product {item.product_id}")
        order.inventory_state = "sold"

    def release_inventory(self, order: Order):
        """reserved -> released, or sold -> released (restock)"""
        if order.inventory_state == "reserved":
            for item in order.items:
                if not self.products.release(item.product_id, item.quantity):
                    logger.error(f"Order {order.order_number}: reserved stock missing for product {item.product_id}")
        elif order.inventory_state == "sold":
            for item in order.items:
                self.products.restock(item.product_id, item.quantity)
        else:
            return

        order.inventory_state = "released"
