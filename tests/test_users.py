"""
Profile updates and account deletion cascade.
"""

from conftest import future


class TestProfile:

    def test_get_profile(self, client, make_user):
        headers, user = make_user()
        resp = client.get("/users/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == user["id"]

    def test_partial_update(self, client, make_user):
        headers, _ = make_user()
        resp = client.patch("/users/me", json={"default_currency": "eur"}, headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["default_currency"] == "EUR"
        assert body["name"] == "Alice"

    def test_email_taken_by_someone_else(self, client, make_user):
        headers, _ = make_user(email="alice@example.com")
        make_user(email="bob@example.com", name="Bob")
        resp = client.patch("/users/me", json={"email": "bob@example.com"}, headers=headers)
        assert resp.status_code == 409

    def test_keeping_own_email_is_fine(self, client, make_user):
        headers, _ = make_user(email="alice@example.com")
        resp = client.patch("/users/me", json={"email": "ALICE@example.com", "name": "Al"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Al"

    def test_password_change(self, client, make_user):
        headers, _ = make_user(email="alice@example.com", password="secret123")
        assert client.patch("/users/me", json={"password": "newpass99"}, headers=headers).status_code == 200

        old = client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        new = client.post("/auth/login", json={"email": "alice@example.com", "password": "newpass99"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_empty_update_is_rejected(self, client, make_user):
        headers, _ = make_user()
        assert client.patch("/users/me", json={}, headers=headers).status_code == 400

    def test_null_name_is_rejected(self, client, make_user):
        headers, _ = make_user()
        assert client.patch("/users/me", json={"name": None}, headers=headers).status_code == 400


class TestDeleteAccount:

    def seed(self, client, headers):
        client.post("/expenses", json={"amount": 10, "category": "Food"}, headers=headers)
        client.post("/incomes", json={"amount": 10, "source": "Salary"}, headers=headers)
        client.post(
            "/budgets",
            json={
                "category": "Food",
                "amount": 100,
                "start_date": "2024-01-01T00:00:00",
                "end_date": "2024-01-31T00:00:00",
            },
            headers=headers,
        )
        client.post("/goals", json={"name": "Car", "target_amount": 100, "target_date": future()}, headers=headers)

    def test_cascade_and_login_fails_afterwards(self, client, make_user):
        headers, _ = make_user(email="alice@example.com", password="secret123")
        self.seed(client, headers)

        resp = client.delete("/users/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["removed"] == {"expenses": 1, "incomes": 1, "budgets": 1, "goals": 1}

        # Old token no longer resolves to a user
        assert client.get("/expenses", headers=headers).status_code == 401
        login = client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        assert login.status_code == 401

        # Re-registering the same email starts from an empty slate
        headers, _ = make_user(email="alice@example.com", password="secret123")
        for path in ("/expenses", "/incomes", "/budgets", "/goals"):
            assert client.get(path, headers=headers).json() == []

    def test_other_users_data_survives(self, client, make_user):
        alice, _ = make_user(email="alice@example.com")
        bob, _ = make_user(email="bob@example.com", name="Bob")
        self.seed(client, alice)
        self.seed(client, bob)

        client.delete("/users/me", headers=alice)

        for path in ("/expenses", "/incomes", "/budgets", "/goals"):
            assert len(client.get(path, headers=bob).json()) == 1
