"""Tests for sign-up, login, logout and cookie sessions."""
from countdown.config import settings
from countdown.services import auth_service


def _sign_up(client, username="alice", email="alice@example.com", password="correct horse"):
    return client.post("/api/auth/signup", json={
        "username": username,
        "email": email,
        "password": password,
    })


class TestSignUp:

    def test_sign_up_starts_session(self, client):
        resp = _sign_up(client)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["username"] == "alice"
        assert data["email"] == "alice@example.com"
        assert "password_hash" not in data

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user_id"] == data["user_id"]

    def test_duplicate_email_conflict(self, client):
        _sign_up(client)
        resp = _sign_up(client, username="alice2", email="ALICE@example.com")
        assert resp.status_code == 409
        assert resp.json() == {"error": "Email already in use", "code": "conflict"}

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/signup", json={"username": "alice", "email": ""})
        assert resp.status_code == 422
        assert resp.json()["error"] == "All fields are required"


class TestLogin:

    def test_login_and_logout(self, client):
        _sign_up(client)
        client.post("/api/auth/logout")
        assert client.get("/api/auth/me").status_code == 401

        resp = client.post("/api/auth/login", json={
            "email": "alice@example.com",
            "password": "correct horse",
        })
        assert resp.status_code == 200
        assert client.get("/api/auth/me").status_code == 200

        assert client.post("/api/auth/logout").status_code == 204
        assert client.get("/api/auth/me").status_code == 401

    def test_wrong_password(self, client):
        _sign_up(client)
        client.cookies.clear()
        resp = client.post("/api/auth/login", json={
            "email": "alice@example.com",
            "password": "wrong",
        })
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or password"

    def test_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or password"


class TestSessions:

    def test_no_cookie_is_unauthenticated(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": "You must be logged in", "code": "unauthenticated"}

    def test_tampered_cookie_rejected(self, client, alice):
        forged = f"{alice.user_id}.{'0' * 64}"
        resp = client.get("/api/auth/me", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={forged}"})
        assert resp.status_code == 401

    def test_cookie_for_deleted_user_rejected(self, client, db, alice):
        token = auth_service.sign_session(alice.user_id)
        db.delete(alice)
        db.commit()
        resp = client.get("/api/auth/me", headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"})
        assert resp.status_code == 401

    def test_session_round_trip(self):
        token = auth_service.sign_session("abc-123")
        assert auth_service.unsign_session(token) == "abc-123"
        assert auth_service.unsign_session(token + "x") is None
        assert auth_service.unsign_session(None) is None
        assert auth_service.unsign_session("no-signature") is None


class TestPasswords:

    def test_hash_is_salted_and_verifiable(self):
        a = auth_service.hash_password("secret")
        b = auth_service.hash_password("secret")
        assert a != b
        assert auth_service.verify_password("secret", a)
        assert not auth_service.verify_password("Secret", a)

    def test_malformed_hash_never_verifies(self):
        assert not auth_service.verify_password("secret", "")
        assert not auth_service.verify_password("secret", "md5$1$salt$abc")
