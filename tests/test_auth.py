from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token, decode_token

from expense_backend.extensions import db
from expense_backend.models import User
from tests.conftest import PASSWORD, auth_headers, login, register


class TestRegistration:

    def test_register_returns_201_without_sensitive_data(self, client):
        resp = register(client)
        assert resp.status_code == 201
        assert resp.get_json() == {"message": "User registered successfully"}

    def test_password_is_stored_hashed(self, app, client):
        register(client)
        with app.app_context():
            user = User.query.filter_by(username="a1").one()
            assert user.password_hash != PASSWORD
            assert user.password_hash.startswith("$pbkdf2-sha256$")
            assert user.check_password(PASSWORD)

    def test_saving_unchanged_password_does_not_rehash(self, app, client):
        register(client)
        with app.app_context():
            user = User.query.filter_by(username="a1").one()
            original = user.password_hash
            user.name = "Renamed"
            db.session.commit()
            assert User.query.filter_by(username="a1").one().password_hash == original

    def test_each_hash_uses_its_own_salt(self):
        first, second = User(), User()
        first.set_password(PASSWORD)
        second.set_password(PASSWORD)
        assert first.password_hash != second.password_hash

    @pytest.mark.parametrize("password", ["aa1!aaaa", "Aa1aaaaa", "Aa!a"])
    def test_weak_password_is_rejected(self, client, password):
        resp = register(client, password=password)
        assert resp.status_code == 400
        assert "Password must be at least 8 characters" in resp.get_json()["message"]

    def test_invalid_email_is_rejected(self, client):
        resp = register(client, email="not-an-email")
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid email format."}

    def test_missing_username(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"name": "A", "email": "a@b.com", "password": PASSWORD},
        )
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "Registration failed"
        assert "username" in body["error"]

    @pytest.mark.parametrize(
        "username,email",
        [("a1", "other@b.com"), ("other", "a@b.com")],
    )
    def test_duplicate_username_or_email_is_a_conflict(self, client, username, email):
        assert register(client).status_code == 201
        resp = register(client, username=username, email=email)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Username or email already exists."}


class TestLogin:

    def test_login_with_username(self, client):
        register(client)
        resp = login(client, "a1")
        assert resp.status_code == 200
        assert resp.get_json()["token"]

    def test_login_with_email(self, client):
        register(client)
        resp = login(client, "a@b.com")
        assert resp.status_code == 200
        assert resp.get_json()["token"]

    def test_token_carries_user_id_and_one_year_expiry(self, app, client):
        register(client)
        token = login(client).get_json()["token"]
        with app.app_context():
            user = User.query.filter_by(username="a1").one()
            claims = decode_token(token)
        assert claims["sub"] == str(user.id)
        lifetime = claims["exp"] - claims["iat"]
        assert 365 * 86400 <= lifetime <= 366 * 86400

    def test_wrong_password_and_unknown_user_look_identical(self, client):
        register(client)
        wrong_password = login(client, "a1", "Bb2@bbbb")
        unknown_user = login(client, "nobody", PASSWORD)
        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.get_json() == unknown_user.get_json() == {"message": "Invalid credentials"}

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={})
        assert resp.status_code == 401

    def test_each_login_mints_an_independent_token(self, client, headers):
        second = login(client).get_json()["token"]
        assert client.get("/api/expenses", headers=auth_headers(second)).status_code == 200
        assert client.get("/api/expenses", headers=headers).status_code == 200


class TestAuthMiddleware:

    def test_missing_header(self, client):
        resp = client.get("/api/expenses")
        assert resp.status_code == 401
        assert resp.get_json() == {"message": "No token, authorization denied"}

    def test_garbage_token(self, client):
        resp = client.get("/api/expenses", headers=auth_headers("not.a.token"))
        assert resp.status_code == 401
        assert resp.get_json() == {"message": "Token is not valid"}

    def test_tampered_signature(self, client, headers):
        header, payload, _ = headers["Authorization"].split(" ")[1].split(".")
        tampered = f"{header}.{payload}.{'A' * 43}"
        resp = client.get("/api/expenses", headers=auth_headers(tampered))
        assert resp.status_code == 401
        assert resp.get_json() == {"message": "Token is not valid"}

    def test_expired_token(self, app, client):
        with app.app_context():
            token = create_access_token(identity="1", expires_delta=timedelta(seconds=-10))
        resp = client.get("/api/expenses", headers=auth_headers(token))
        assert resp.status_code == 401
        assert resp.get_json() == {"message": "Token is not valid"}

    def test_token_survives_user_deletion(self, app, client, headers):
        with app.app_context():
            db.session.delete(User.query.filter_by(username="a1").one())
            db.session.commit()
        resp = client.get("/api/expenses", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json() == []
