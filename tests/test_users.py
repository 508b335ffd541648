from expense_api.models.user import User
from expense_api.models.expense import Expense
from expense_api.models.group_invitation import GroupInvitation
from expense_api.core.security import verify_password


def _register(client, username="bob", email="b@x.com", password="secret123"):
    return client.post(
        "/api/users", json={"username": username, "email": email, "password": password}
    )


class TestRegistration:
    """Tests for POST /api/users"""

    def test_register_stores_hash_not_password(self, client, db_session):
        response = _register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "b@x.com"
        assert "password" not in data and "password_hash" not in data

        user = db_session.query(User).filter_by(email="b@x.com").one()
        assert user.password_hash != "secret123"
        assert verify_password("secret123", user.password_hash)

    def test_email_is_normalized(self, client):
        response = _register(client, email="Bob@X.com")
        assert response.json()["email"] == "bob@x.com"

    def test_duplicate_email_rejected(self, client):
        _register(client)
        response = _register(client, username="bobby", email="B@x.com")

        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    def test_short_password_rejected(self, client):
        response = _register(client, password="123")
        assert response.status_code == 400

    def test_registration_does_not_accept_pending_invitations(self, client, db_session, user_a_headers, shared_group):
        """Joining a group always needs the token; registering is not enough"""
        client.post(
            f"/api/groups/{shared_group.id}/invite", headers=user_a_headers, json={"email": "new@x.com"}
        )

        _register(client, username="newbie", email="new@x.com")

        token = client.post(
            "/api/users/login", json={"email": "new@x.com", "password": "secret123"}
        ).json()["access_token"]
        groups = client.get("/api/groups", headers={"Authorization": f"Bearer {token}"}).json()
        assert groups == []
        assert db_session.query(GroupInvitation).filter_by(used=True).count() == 0


class TestLogin:
    """Tests for POST /api/users/login"""

    def test_login_returns_usable_token(self, client):
        _register(client)

        response = client.post("/api/users/login", json={"email": "b@x.com", "password": "secret123"})

        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "b@x.com"

    def test_wrong_password(self, client):
        _register(client)
        response = client.post("/api/users/login", json={"email": "b@x.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_unknown_email(self, client):
        response = client.post("/api/users/login", json={"email": "ghost@x.com", "password": "whatever"})
        assert response.status_code == 401


class TestUserManagement:
    """Tests for /api/users/{id}"""

    def test_get_user(self, client, user_a_headers, user_b):
        response = client.get(f"/api/users/{user_b.id}", headers=user_a_headers)
        assert response.status_code == 200
        assert response.json()["username"] == "bob"

    def test_get_missing_user(self, client, user_a_headers):
        assert client.get("/api/users/9999", headers=user_a_headers).status_code == 404

    def test_list_users(self, client, user_a_headers, user_b):
        response = client.get("/api/users", headers=user_a_headers)
        assert [u["email"] for u in response.json()] == ["a@x.com", "b@x.com"]

    def test_update_self(self, client, user_a, user_a_headers):
        response = client.put(
            f"/api/users/{user_a.id}", headers=user_a_headers, json={"username": "alice2"}
        )
        assert response.status_code == 200
        assert response.json()["username"] == "alice2"

    def test_update_email_to_taken_address(self, client, user_a, user_a_headers, user_b):
        response = client.put(
            f"/api/users/{user_a.id}", headers=user_a_headers, json={"email": "b@x.com"}
        )
        assert response.status_code == 400

    def test_cannot_update_other_user(self, client, user_a_headers, user_b):
        response = client.put(
            f"/api/users/{user_b.id}", headers=user_a_headers, json={"username": "hacked"}
        )
        assert response.status_code == 403

    def test_delete_self_then_token_rejected(self, client, user_a, user_a_headers):
        user_id = user_a.id
        response = client.delete(f"/api/users/{user_id}", headers=user_a_headers)

        assert response.status_code == 200
        assert response.json()["deleted_user_id"] == user_id
        assert client.get("/api/users/me", headers=user_a_headers).status_code == 401

    def test_cannot_delete_other_user(self, client, user_a_headers, user_b):
        response = client.delete(f"/api/users/{user_b.id}", headers=user_a_headers)
        assert response.status_code == 403

    def test_delete_keeps_group_expenses_for_other_members(
        self, client, db_session, user_a_headers, user_b, user_b_headers, shared_group
    ):
        """Only personal expenses go with the account; the group ledger stays intact"""
        hotel = client.post(
            "/api/expenses",
            headers=user_b_headers,
            json={"description": "Hotel", "amount": 300, "group_id": shared_group.id},
        ).json()
        client.post("/api/expenses", headers=user_b_headers, json={"description": "Lunch", "amount": 12})

        response = client.delete(f"/api/users/{user_b.id}", headers=user_b_headers)
        assert response.status_code == 200

        group_expenses = client.get(f"/api/expenses/group/{shared_group.id}", headers=user_a_headers).json()
        assert [e["id"] for e in group_expenses] == [hotel["id"]]
        assert group_expenses[0]["user_id"] is None
        assert db_session.query(Expense).filter(Expense.description == "Lunch").count() == 0

        # Remaining members still govern the orphaned expense
        update = client.patch(f"/api/expenses/{hotel['id']}", headers=user_a_headers, json={"amount": 280})
        assert update.status_code == 200
