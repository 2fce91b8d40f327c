"""Pytest configuration and fixtures for testing."""
from dataclasses import replace

import pytest

from api import create_app
from api.config import Settings
from api.sessions import SessionCoordinator
from models import DBStorage
from models.queries import RefreshTokenStore, UserStore

TEST_SECRET = "test-secret-that-is-long-enough-for-hs256-keys"


@pytest.fixture
def settings():
    return Settings(
        base_url="http://localhost:",
        port=8080,
        platform="test",
        database_url="sqlite://",
        jwt_secret=TEST_SECRET,
        client_url="http://localhost:5173",
    )


@pytest.fixture
def storage():
    """An in-memory database with the schema created."""
    storage = DBStorage("sqlite://")
    storage.reload()
    yield storage
    storage.dispose()


@pytest.fixture
def users(storage):
    return UserStore(storage)


@pytest.fixture
def refresh_tokens(storage):
    return RefreshTokenStore(storage)


@pytest.fixture
def coordinator(settings, users, refresh_tokens):
    return SessionCoordinator(settings, users, refresh_tokens)


@pytest.fixture
def make_app():
    created = []

    def _make(settings, **overrides):
        app = create_app(replace(settings, **overrides))
        created.append(app)
        return app

    yield _make
    for app in created:
        app.extensions["storage"].dispose()


@pytest.fixture
def app(make_app, settings):
    return make_app(settings)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(email="alice@example.com", password="pw123456"):
        return client.post("/api/users/create", json={"email": email, "password": password})

    return _register


@pytest.fixture
def login(client):
    def _login(email="alice@example.com", password="pw123456"):
        return client.post("/api/users/login", json={"email": email, "password": password})

    return _login
