"""
Tests for rate limiting, metrics, security headers and request ids
"""
import logging
from unittest.mock import patch

from fastapi.testclient import TestClient

from kalakari.core.config import settings
from kalakari.core.metrics import MetricsCollector, metrics
from kalakari.core.rate_limit import RateLimiter
from kalakari.main import app
from kalakari.repositories import ProductRepository


class TestRateLimiter:
    """Sliding window counter"""

    def test_allows_up_to_limit(self):
        limiter = RateLimiter()

        results = [limiter.is_allowed("ip:1", max_requests=3)[0] for _ in range(4)]

        assert results == [True, True, True, False]

    def test_remaining_counts_down(self):
        limiter = RateLimiter()

        _, first_remaining, _ = limiter.is_allowed("ip:1", max_requests=5)
        _, second_remaining, _ = limiter.is_allowed("ip:1", max_requests=5)

        assert (first_remaining, second_remaining) == (4, 3)

    def test_identifiers_are_independent(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:1", max_requests=1)

        assert limiter.is_allowed("ip:2", max_requests=1)[0] is True

    def test_retry_after_when_limited(self):
        limiter = RateLimiter()
        limiter.is_allowed("ip:1", max_requests=1, window_seconds=60)

        allowed, remaining, retry_after = limiter.is_allowed("ip:1", max_requests=1, window_seconds=60)

        assert allowed is False
        assert remaining == 0
        assert 1 <= retry_after <= 61


class TestRateLimitMiddleware:

    def test_auth_routes_limited(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_AUTH", 2)

        codes = [
            client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"}).status_code
            for _ in range(3)
        ]

        assert codes == [401, 401, 429]

    def test_limited_response_body_and_headers(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_GENERAL", 1)

        client.get("/api/products")
        response = client.get("/api/products")

        assert response.status_code == 429
        assert response.json() == {"success": False, "message": "Too many requests. Please slow down."}
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert "Retry-After" in response.headers

    def test_health_exempt(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_GENERAL", 1)

        codes = {client.get("/health").status_code for _ in range(3)}

        assert codes == {200}

    def test_rotating_bearer_tokens_share_ip_bucket(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_AUTH", 3)

        codes = [
            client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"},
                        headers={"Authorization": f"Bearer junk{i}"}).status_code
            for i in range(5)
        ]

        assert codes == [401, 401, 401, 429, 429]

    def test_spoofed_forwarded_for_ignored(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_AUTH", 2)

        codes = [
            client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"},
                        headers={"X-Forwarded-For": f"203.0.113.{i}"}).status_code
            for i in range(3)
        ]

        assert codes == [401, 401, 429]

    def test_forwarded_for_from_trusted_proxy(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_AUTH", 1)
        monkeypatch.setattr(settings, "TRUSTED_PROXIES", "10.0.0.1, testclient")

        codes = [
            client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"},
                        headers={"X-Forwarded-For": f"203.0.113.{i}, 10.0.0.1"}).status_code
            for i in range(3)
        ]

        assert codes == [401, 401, 401]

    def test_verified_users_get_own_bucket(self, client, monkeypatch, make_user, headers_for):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_GENERAL", 1)
        first, second = make_user(), make_user()

        assert client.get("/api/products", headers=headers_for(first)).status_code == 200
        assert client.get("/api/products", headers=headers_for(first)).status_code == 429
        assert client.get("/api/products", headers=headers_for(second)).status_code == 200

    def test_unverifiable_token_falls_back_to_ip(self, client, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "RATE_LIMIT_GENERAL", 1)

        codes = [
            client.get("/api/products", headers={"Authorization": f"Bearer junk{i}"}).status_code
            for i in range(2)
        ]

        assert codes == [200, 429]


class TestMetrics:

    def test_collector_snapshot(self):
        collector = MetricsCollector()
        collector.record("GET", "/api/products", 200, 10.0)
        collector.record("GET", "/api/products", 200, 30.0)
        collector.record("POST", "/api/orders", 500, 5.0)

        snapshot = collector.snapshot()

        assert snapshot["requests"]["total"] == 3
        assert snapshot["requests"]["errors"] == 1
        assert snapshot["requests"]["by_status"] == {"2xx": 2, "5xx": 1}
        assert snapshot["requests"]["top_routes"]["GET /api/products"] == 2
        assert snapshot["response_time_ms"]["max"] == 30.0
        assert snapshot["response_time_ms"]["average"] == 15.0

    def test_admin_metrics_endpoint(self, client, admin, headers_for):
        client.get("/health")

        response = client.get("/api/admin/metrics", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["data"]["metrics"]["requests"]["total"] >= 1

    def test_unhandled_errors_counted_and_logged(self, client, caplog):
        failing = TestClient(app, raise_server_exceptions=False)

        with patch.object(ProductRepository, "find_all", side_effect=RuntimeError("database gone")):
            with caplog.at_level(logging.ERROR, logger="kalakari.requests"):
                response = failing.get("/api/products")

        assert response.status_code == 500
        snapshot = metrics.snapshot()
        assert snapshot["requests"]["total"] == 1
        assert snapshot["requests"]["errors"] == 1
        assert snapshot["requests"]["by_status"] == {"5xx": 1}
        assert any("GET /api/products 500" in r.getMessage() for r in caplog.records)


class TestSecurityHeaders:

    def test_headers_present(self, client):
        response = client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Content-Security-Policy" in response.headers
        assert "Strict-Transport-Security" not in response.headers

    def test_request_id_echoed(self, client):
        response = client.get("/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    def test_request_id_generated(self, client):
        assert client.get("/").headers.get("X-Request-ID")
