"""
API tests for the service banner, health check, development endpoints and seeding
"""
from kalakari.core.auth import decode_access_token
from kalakari.dev import fixtures
from kalakari.models import Order, Product, User
from kalakari.seed import seed


class TestHealth:

    def test_banner(self, client):
        body = client.get("/").json()

        assert body["status"] == "online"
        assert body["environment"] == "test"

    def test_health_reports_database(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["service"] == "kalakari-api"
        assert body["database"]["status"] == "connected"
        assert body["database"]["error"] is None


class TestDevEndpoints:

    def test_products_filter_and_paginate(self, client):
        body = client.get("/api/dev/products", params={"category": "Textiles", "limit": 5}).json()

        assert body["data"]["pagination"] == {"current": 1, "pages": 4, "total": 18}
        assert len(body["data"]["products"]) == 5
        assert all(p["category"] == "Textiles" for p in body["data"]["products"])

    def test_price_range(self, client):
        products = client.get("/api/dev/products",
                              params={"min_price": 2000, "limit": 100}).json()["data"]["products"]

        assert products
        assert all(p["price"] >= 2000 for p in products)

    def test_unknown_product(self, client):
        assert client.get("/api/dev/products/9999").status_code == 404

    def test_mock_login(self, client):
        response = client.post("/api/dev/auth/login",
                               json={"email": "Priya@gmail.com", "password": fixtures.MOCK_PASSWORD})

        data = response.json()["data"]
        assert data["user"]["role"] == "customer"
        assert decode_access_token(data["token"])["sub"] == str(data["user"]["id"])

    def test_mock_token_cannot_act_as_real_user(self, client, make_user):
        # Factory users take ids 1 and 2, matching the fixture ids
        real_users = [make_user(), make_user()]

        login = client.post("/api/dev/auth/login",
                            json={"email": "priya@gmail.com", "password": fixtures.MOCK_PASSWORD})
        token = login.json()["data"]["token"]

        assert int(decode_access_token(token)["sub"]) in {u.id for u in real_users}
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_mock_login_wrong_password(self, client):
        response = client.post("/api/dev/auth/login", json={"email": "priya@gmail.com", "password": "guess"})
        assert response.status_code == 401

    def test_user_orders(self, client):
        orders = client.get("/api/dev/users/2/orders").json()["data"]["orders"]

        assert [o["id"] for o in orders] == [1, 2]
        assert orders[0]["pricing"]["total"] == float(fixtures.ORDERS[0]["pricing"]["total"])


class TestSeed:

    def test_seed_loads_fixtures(self, db):
        counts = seed(db)

        assert counts == {"users": 7, "artisans": 3, "products": 54, "orders": 4}
        assert db.query(User).filter(User.role == "admin").count() == 1
        assert db.query(Order).filter(Order.inventory_state == "reserved").count() == 1

    def test_seeded_stock_is_consistent(self, db):
        seed(db)

        for product in db.query(Product).all():
            assert product.inventory_available + product.inventory_reserved <= product.inventory_total
