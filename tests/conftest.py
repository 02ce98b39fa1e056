"""
Shared pytest fixtures.

Every test gets its own app built on a private in-memory SQLite database,
so vault items and audit rows never leak between tests.
"""

import base64

import pytest
from fastapi.testclient import TestClient

from securevault.core.config import Settings
from securevault.db.base import Base
from securevault.db.models.user import User
from securevault.main import create_app
from securevault.services.vault_store import VaultStore

TEST_KEY = base64.b64encode(bytes(range(32))).decode("ascii")


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        APP_KEY=f"base64:{TEST_KEY}",
        ENVIRONMENT="testing",
        LOG_LEVEL="WARNING",
        CORS_ORIGINS=[],
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    Base.metadata.create_all(bind=app.state.engine)
    yield app
    Base.metadata.drop_all(bind=app.state.engine)
    app.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def cipher(app):
    return app.state.cipher


@pytest.fixture
def recorder(app):
    return app.state.audit


@pytest.fixture
def store(db, cipher):
    return VaultStore(db, cipher)


def _make_user(db, name, email):
    user = User(name=name, email=email, password_hash="unused", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def alice(db):
    return _make_user(db, "Alice", "alice@example.com")


@pytest.fixture
def bob(db):
    return _make_user(db, "Bob", "bob@example.com")
