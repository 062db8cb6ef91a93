"""
API tests for registration, login, session and addresses
"""


def _register(client, **overrides):
    payload = {
        "name": "Priya Sharma",
        "email": "priya@example.com",
        "password": "Kalakari2024!",
        "phone": "9876543211",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegisterAndLogin:

    def test_register_sets_cookie_and_hides_hash(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User registered successfully"
        assert body["data"]["user"]["role"] == "customer"
        assert "password_hash" not in body["data"]["user"]
        assert "kalakari-token" in response.cookies

    def test_duplicate_email_is_409(self, client):
        _register(client)

        response = _register(client, email="PRIYA@example.com")

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "User already exists"}

    def test_admin_role_cannot_be_self_assigned(self, client):
        response = _register(client, role="admin")

        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed"
        assert response.json()["errors"][0]["field"] == "role"

    def test_login(self, client, customer, password):
        response = client.post("/api/auth/login", json={"email": customer.email, "password": password})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == customer.id
        assert response.json()["data"]["token"]

    def test_login_wrong_password(self, client, customer):
        response = client.post("/api/auth/login", json={"email": customer.email, "password": "wrong-password"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_deactivated(self, client, make_user, password):
        user = make_user(is_active=False)

        response = client.post("/api/auth/login", json={"email": user.email, "password": password})

        assert response.status_code == 403

    def test_cookie_session_reaches_me(self, client):
        _register(client)

        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "priya@example.com"
        assert response.json()["data"]["artisan_profile"] is None

    def test_change_password(self, client, customer, headers_for, password):
        headers = headers_for(customer)

        wrong = client.put("/api/auth/password", headers=headers,
                           json={"current_password": "nope", "new_password": "newsecret1"})
        right = client.put("/api/auth/password", headers=headers,
                           json={"current_password": password, "new_password": "newsecret1"})

        assert wrong.status_code == 400
        assert wrong.json()["message"] == "Current password is incorrect"
        assert right.status_code == 200
        login = client.post("/api/auth/login", json={"email": customer.email, "password": "newsecret1"})
        assert login.status_code == 200


class TestAddresses:

    ADDRESS = {
        "name": "Home",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "phone": "9876543211",
    }

    def test_add_and_list(self, client, customer, headers_for):
        headers = headers_for(customer)

        created = client.post("/api/addresses", json=self.ADDRESS, headers=headers)
        listed = client.get("/api/addresses", headers=headers)

        assert created.status_code == 201
        assert len(listed.json()["data"]["addresses"]) == 1

    def test_invalid_pincode_rejected(self, client, customer, headers_for):
        response = client.post("/api/addresses", json={**self.ADDRESS, "pincode": "012345"},
                               headers=headers_for(customer))

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "pincode"

    def test_single_default(self, client, customer, headers_for):
        headers = headers_for(customer)
        first = client.post("/api/addresses", json=self.ADDRESS, headers=headers).json()
        second = client.post("/api/addresses", json={**self.ADDRESS, "name": "Work"}, headers=headers).json()
        second_id = second["data"]["addresses"][-1]["id"]

        client.put(f"/api/addresses/{second_id}/default", headers=headers)

        addresses = client.get("/api/addresses", headers=headers).json()["data"]["addresses"]
        assert [a["id"] for a in addresses if a["is_default"]] == [second_id]
        assert first["success"] is True

    def test_update_rejects_null(self, client, customer, headers_for):
        headers = headers_for(customer)
        address_id = client.post("/api/addresses", json=self.ADDRESS,
                                 headers=headers).json()["data"]["addresses"][0]["id"]

        response = client.put(f"/api/addresses/{address_id}", json={"street": None}, headers=headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "street"

    def test_unknown_address_is_404(self, client, customer, headers_for):
        response = client.delete("/api/addresses/999", headers=headers_for(customer))

        assert response.status_code == 404
        assert response.json()["message"] == "Address not found"
