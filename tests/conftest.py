"""
Shared fixtures.

Every test gets a fresh app on an in-memory SQLite database and a fake
image store, so nothing touches the network or the filesystem.
"""

import pytest

from expense_backend import create_app
from expense_backend.config import TestingConfig
from expense_backend.extensions import db
from expense_backend.storage import ImageStorage, ImageStorageError

PASSWORD = "Aa1!aaaa"


class FakeImageStorage(ImageStorage):
    """Keeps uploads in memory; set ``fail`` to simulate a broken store."""

    def __init__(self):
        self.saved = {}
        self.fail = False

    def save(self, data, key, content_type):
        if self.fail:
            raise ImageStorageError("storage unavailable")
        self.saved[key] = (data, content_type)
        return f"https://storage.example.com/receipts/{key}"


@pytest.fixture
def image_storage():
    return FakeImageStorage()


@pytest.fixture
def app(image_storage):
    app = create_app(TestingConfig, image_storage=image_storage)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username="a1", email="a@b.com", password=PASSWORD, name="A"):
    return client.post(
        "/api/auth/register",
        json={"name": name, "username": username, "email": email, "password": password},
    )


def login(client, identifier="a1", password=PASSWORD):
    return client.post(
        "/api/auth/login", json={"emailOrUsername": identifier, "password": password}
    )


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client):
    """Register a user and return bearer headers for them."""
    def _make(username="a1", email="a@b.com"):
        assert register(client, username=username, email=email).status_code == 201
        resp = login(client, identifier=username)
        assert resp.status_code == 200
        return auth_headers(resp.get_json()["token"])
    return _make


@pytest.fixture
def headers(make_user):
    return make_user()
