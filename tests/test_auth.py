"""
Tests for identity endpoints.
"""
import pytest

from src.core.db.session import resolve_principal
from src.core.principal import Role


class TestAuthRegistration:
    """Tests for user registration."""

    def test_register_new_user(self, db_session, client_factory):
        """Test successful user registration."""
        client = client_factory(db_session)
        response = client.post("/api/auth/new", json={"username": "newuser"})

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "newuser"
        assert data["role"] == "user"
        assert data["sk"].startswith("sk-")
        assert data["rk"].startswith("rk-")
        assert "secret_key" in response.cookies

    def test_register_admin_from_config(self, db_session, client_factory, monkeypatch):
        """Usernames listed in INKWELL_ADMIN_USERNAMES register as admins."""
        monkeypatch.setenv("INKWELL_ADMIN_USERNAMES", "chief, editor")
        client = client_factory(db_session)
        response = client.post("/api/auth/new", json={"username": "editor"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        principal = resolve_principal(db_session, response.json()["sk"])
        assert principal.role == Role.ADMIN

    def test_register_duplicate_username(self, db_session, client_factory, test_user_data):
        """Test that duplicate usernames are rejected."""
        client = client_factory(db_session)
        response = client.post("/api/auth/new", json={"username": test_user_data["username"]})

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"].lower()

    @pytest.mark.parametrize("username", ["ab", "bad name", "admin"])
    def test_register_invalid_username(self, db_session, client_factory, username):
        """Short, malformed and reserved usernames are rejected."""
        client = client_factory(db_session)
        response = client.post("/api/auth/new", json={"username": username})

        assert response.status_code == 422
        assert response.json()["kind"] == "validation_error"


class TestAuthRecovery:
    """Tests for key recovery."""

    def test_recovery_valid_keys(self, db_session, client_factory, test_user_data):
        """Test successful key recovery with valid keys."""
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/recovery",
            json={"sk": test_user_data["sk"], "rk": test_user_data["rk"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sk"] != test_user_data["sk"]
        assert data["rk"] == test_user_data["rk"]
        # Old key no longer resolves, new one does
        assert resolve_principal(db_session, test_user_data["sk"]) is None
        assert resolve_principal(db_session, data["sk"]).id == test_user_data["username"]

    def test_recovery_invalid_recovery_key(self, db_session, client_factory, test_user_data):
        """Test recovery with invalid recovery key."""
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/recovery",
            json={"sk": test_user_data["sk"], "rk": "rk-invalidkey12345678901234567890123"},
        )

        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"

    def test_recovery_keys_from_different_users(
        self, db_session, client_factory, test_user_data, other_user_data
    ):
        """A recovery key only rotates its own account's secret key."""
        client = client_factory(db_session)
        response = client.post(
            "/api/auth/recovery",
            json={"sk": test_user_data["sk"], "rk": other_user_data["rk"]},
        )

        assert response.status_code == 401


class TestAuthLogin:
    """Tests for login verification and logout."""

    def test_verify_valid_key(self, db_session, client_factory, admin_user_data):
        client = client_factory(db_session)
        response = client.post("/api/auth/verify", json={"sk": admin_user_data["sk"]})

        assert response.status_code == 200
        assert response.json() == {"username": "siteadmin", "role": "admin", "valid": True}

    def test_verify_invalid_key(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session)
        response = client.post("/api/auth/verify", json={"sk": "sk-invalidkey12345678"})

        assert response.status_code == 401

    def test_logout_clears_cookie(self, db_session, client_factory, test_user_data):
        client = client_factory(db_session, user_sk=test_user_data["sk"])
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert 'secret_key=""' in response.headers["set-cookie"]
