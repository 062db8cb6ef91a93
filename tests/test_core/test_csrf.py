"""
Unit tests for CSRF token issuance and validation
"""
import base64

from kalakari.core import csrf

SECRET = "unit-test-secret"


class TestCsrfTokens:
    """generate_token / validate_token"""

    def test_token_validates_for_its_session(self):
        token = csrf.generate_token("session-a", secret=SECRET)
        assert csrf.validate_token(token, "session-a", secret=SECRET)

    def test_token_rejected_for_another_session(self):
        token = csrf.generate_token("session-a", secret=SECRET)
        assert not csrf.validate_token(token, "session-b", secret=SECRET)

    def test_anonymous_token_accepted_for_any_session(self):
        token = csrf.generate_token(None, secret=SECRET)
        assert csrf.validate_token(token, "session-b", secret=SECRET)

    def test_expired_token_rejected(self):
        issued = 1_700_000_000_000
        token = csrf.generate_token("s", secret=SECRET, now_ms=issued)

        assert csrf.validate_token(token, "s", secret=SECRET, max_age_seconds=60, now_ms=issued + 59_000)
        assert not csrf.validate_token(token, "s", secret=SECRET, max_age_seconds=60, now_ms=issued + 61_000)

    def test_token_from_the_future_rejected(self):
        issued = 1_700_000_000_000
        token = csrf.generate_token("s", secret=SECRET, now_ms=issued)
        assert not csrf.validate_token(token, "s", secret=SECRET, now_ms=issued - 1)

    def test_tampered_signature_rejected(self):
        token = csrf.generate_token("s", secret=SECRET)
        decoded = base64.b64decode(token).decode()
        tampered = decoded[:-1] + ("0" if decoded[-1] != "0" else "1")

        assert not csrf.validate_token(base64.b64encode(tampered.encode()).decode(), "s", secret=SECRET)

    def test_wrong_secret_rejected(self):
        token = csrf.generate_token("s", secret=SECRET)
        assert not csrf.validate_token(token, "s", secret="other-secret")

    def test_garbage_rejected(self):
        assert not csrf.validate_token("not base64 at all!", "s", secret=SECRET)
        assert not csrf.validate_token(base64.b64encode(b"a:b").decode(), "s", secret=SECRET)


class TestCsrfMiddleware:
    """Mutating requests need a token; safe methods and skip paths do not"""

    def test_missing_token_rejected(self, client, customer):
        from kalakari.core.auth import create_access_token

        response = client.post(
            "/api/cart",
            json={"product_id": 1},
            headers={"Authorization": f"Bearer {create_access_token(customer.id, customer.role)}"},
        )

        assert response.status_code == 403
        assert response.json()["message"] == "CSRF token missing"

    def test_invalid_token_rejected(self, client):
        response = client.post("/api/cart", json={"product_id": 1}, headers={"X-CSRF-Token": "bogus"})

        assert response.status_code == 403
        assert response.json()["message"] == "CSRF token invalid"

    def test_issued_token_accepted(self, client, customer, make_product):
        from kalakari.core.auth import create_access_token

        product = make_product()
        issued = client.get("/api/csrf-token").json()

        response = client.post(
            "/api/cart",
            json={"product_id": product.id},
            headers={
                "Authorization": f"Bearer {create_access_token(customer.id, customer.role)}",
                "X-CSRF-Token": issued["csrfToken"],
            },
        )

        assert issued["success"] is True
        assert response.status_code == 200

    def test_token_accepted_as_query_parameter(self, client, customer, make_product):
        from kalakari.core.auth import create_access_token

        product = make_product()

        response = client.post(
            "/api/cart",
            params={"_csrf": csrf.generate_token()},
            json={"product_id": product.id},
            headers={"Authorization": f"Bearer {create_access_token(customer.id, customer.role)}"},
        )

        assert response.status_code == 200

    def test_invalid_query_parameter_rejected(self, client):
        response = client.post("/api/cart", params={"_csrf": "bogus"}, json={"product_id": 1})

        assert response.status_code == 403
        assert response.json()["message"] == "CSRF token invalid"

    def test_password_reset_paths_are_not_exempt(self):
        assert not any(path.startswith("/api/auth/forgot") or path.startswith("/api/auth/reset")
                       for path in csrf.SKIP_PATHS)

    def test_login_is_exempt(self, client):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "x"})
        assert response.status_code == 401
