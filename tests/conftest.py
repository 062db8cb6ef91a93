"""
Pytest fixtures and configuration for Kalakari tests

The app runs against an in-memory SQLite database; every test gets fresh
tables and a TestClient whose requests share the test's session.
"""
import os

# Must be set before kalakari is imported (settings are read at import time)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["CSRF_SECRET"] = "test-csrf-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENABLE_DEV_ENDPOINTS"] = "true"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "whsec_test"

import pytest  # noqa: E402
from decimal import Decimal  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from kalakari.core import csrf  # noqa: E402
from kalakari.core.auth import create_access_token, hash_password  # noqa: E402
from kalakari.core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from kalakari.core.metrics import metrics  # noqa: E402
from kalakari.core.rate_limit import rate_limiter  # noqa: E402
from kalakari.main import app  # noqa: E402
from kalakari.models import Artisan, Product, User  # noqa: E402

PASSWORD = "secret123"

# Hashing is slow; every factory user shares one hash
_PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def db():
    """
    Fresh schema and session per test

    Scope: function (tables are dropped afterwards)
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient whose requests use the test session"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    metrics.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory: make_user(role="customer", email=None, **fields)"""
    counter = {"n": 0}

    def _make(role: str = "customer", email: str = None, **fields) -> User:
        counter["n"] += 1
        user = User(
            name=fields.pop("name", f"Test {role.title()} {counter['n']}"),
            email=email or f"{role}{counter['n']}@example.com",
            phone=fields.pop("phone", "9876543210"),
            password_hash=_PASSWORD_HASH,
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_artisan(db, make_user):
    """Factory: artisan profile (approved by default) with its own user"""

    def _make(user: User = None, approved: bool = True, **fields) -> Artisan:
        user = user or make_user(role="artisan")
        artisan = Artisan(
            user_id=user.id,
            business_name=fields.pop("business_name", f"Studio {user.id}"),
            description=fields.pop("description", "Handmade goods from a family workshop"),
            craft_type=fields.pop("craft_type", "Pottery"),
            state=fields.pop("state", "Rajasthan"),
            city=fields.pop("city", "Jaipur"),
            experience=fields.pop("experience", 5),
            languages=fields.pop("languages", ["Hindi"]),
            is_approved=approved,
            is_verified=approved,
            **fields,
        )
        db.add(artisan)
        db.commit()
        db.refresh(artisan)
        return artisan

    return _make


@pytest.fixture
def make_product(db, make_artisan):
    """Factory: approved, active product with `stock` units available"""

    def _make(artisan: Artisan = None, stock: int = 10, price: str = "500", **fields) -> Product:
        artisan = artisan or make_artisan()
        product = Product(
            artisan_id=artisan.id,
            name=fields.pop("name", "Terracotta Vase"),
            description=fields.pop("description", "A hand-thrown terracotta vase"),
            category=fields.pop("category", "Pottery"),
            price=Decimal(price),
            inventory_total=fields.pop("inventory_total", stock),
            inventory_available=stock,
            inventory_reserved=fields.pop("inventory_reserved", 0),
            is_approved=fields.pop("is_approved", True),
            **fields,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


def auth_headers(user: User) -> dict:
    """Bearer token plus an anonymous CSRF token (accepted for any session)"""
    return {
        "Authorization": f"Bearer {create_access_token(user.id, user.role)}",
        "X-CSRF-Token": csrf.generate_token(),
    }


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def customer(make_user):
    return make_user(role="customer")


@pytest.fixture
def admin(make_user):
    return make_user(role="admin")


@pytest.fixture
def shipping_address():
    return {
        "name": "Priya Sharma",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "phone": "9876543211",
    }


@pytest.fixture
def password():
    """Plain-text password of every factory user"""
    return PASSWORD
