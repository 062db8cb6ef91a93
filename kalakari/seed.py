"""
Load the development fixtures into the configured database

Usage:
    python -m kalakari.seed [--reset]

Without --reset an already populated database is left untouched.
"""
import argparse
import logging

from sqlalchemy.orm import Session

from kalakari.core.database import Base, SessionLocal, engine, init_db
from kalakari.core.auth import hash_password
from kalakari.core.logging import configure_logging
from kalakari.dev import fixtures
from kalakari.models import Artisan, Order, OrderItem, OrderStatusHistory, Product, User

logger = logging.getLogger(__name__)


def seed(db: Session) -> dict:
    """Insert fixtures; returns counts per table"""
    password_hash = hash_password(fixtures.MOCK_PASSWORD)

    users = {}
    for data in fixtures.USERS:
        fields = {k: v for k, v in data.items() if k != "id"}
        users[data["id"]] = User(password_hash=password_hash, **fields)
        db.add(users[data["id"]])
    db.flush()

    artisans = {}
    for data in fixtures.ARTISANS:
        fields = {k: v for k, v in data.items() if k not in ("id", "user_id")}
        artisans[data["id"]] = Artisan(
            user_id=users[data["user_id"]].id,
            is_approved=True,
            is_verified=True,
            **fields,
        )
        db.add(artisans[data["id"]])
    db.flush()

    products = {}
    for data in fixtures.PRODUCTS:
        fields = {k: v for k, v in data.items() if k not in ("id", "artisan_id")}
        products[data["id"]] = Product(artisan_id=artisans[data["artisan_id"]].id, **fields)
        db.add(products[data["id"]])
    db.flush()

    for data in fixtures.ORDERS:
        pricing = data["pricing"]
        paid = data["payment_status"] == "completed"
        order = Order(
            order_number=data["order_number"],
            customer_id=users[data["customer_id"]].id,
            shipping_address=data["shipping_address"],
            subtotal=pricing["subtotal"],
            shipping_cost=pricing["shipping"],
            tax_amount=pricing["tax"],
            discount_amount=pricing["discount"],
            total=pricing["total"],
            payment_method=data["payment_method"],
            payment_status=data["payment_status"],
            status=data["status"],
            inventory_state="sold" if paid else "reserved",
        )
        for item in data["items"]:
            product = products[item["product_id"]]
            order.items.append(OrderItem(
                product_id=product.id,
                artisan_id=product.artisan_id,
                product_name=item["product_name"],
                quantity=item["quantity"],
                unit_price=item["unit_price"],
            ))
            # Paid orders have left the stock, unpaid ones still hold a reservation
            product.inventory_available -= item["quantity"]
            if paid:
                product.inventory_total -= item["quantity"]
            else:
                product.inventory_reserved += item["quantity"]
        order.status_history.append(OrderStatusHistory(status=data["status"], comment="Seeded"))
        db.add(order)

    db.commit()
    return {
        "users": len(users),
        "artisans": len(artisans),
        "products": len(products),
        "orders": len(fixtures.ORDERS),
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Load development fixtures into the database")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args(argv)

    configure_logging()

    if args.reset:
        logger.warning("Dropping all tables")
        from kalakari import models  # noqa: F401
        Base.metadata.drop_all(bind=engine)
    init_db()

    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            logger.info("Database already has users, skipping seed (use --reset to reload)")
            return
        counts = seed(db)
        logger.info(f"Seeded {counts}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
