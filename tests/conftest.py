"""
Test fixtures for ProTimer.

Provides app, client, auth_client, other_client, guest_client and db fixtures
backed by a file-based SQLite database in a temp dir.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

sys.path.insert(0, str(Path(__file__).parent.parent))

TEST_PASSWORD = "password123"


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite and two seeded users."""
    from app import create_app

    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.db"),
        "SECRET_KEY": "test-secret-key",
        "WTF_CSRF_ENABLED": False,
    })

    with app.app_context():
        from database import get_db, init_db, run_migrations

        init_db()
        run_migrations()

        db = get_db()
        password_hash = generate_password_hash(TEST_PASSWORD)
        now = datetime.now().isoformat()
        db.execute(
            "INSERT INTO users (id, username, password_hash, email, created_at) "
            "VALUES (1, 'alice', ?, 'alice@example.com', ?)",
            (password_hash, now),
        )
        db.execute(
            "INSERT INTO users (id, username, password_hash, email, created_at) "
            "VALUES (2, 'bob', ?, 'bob@example.com', ?)",
            (password_hash, now),
        )
        db.commit()

    yield app


def _login(app, username: str):
    client = app.test_client()
    resp = client.post("/api/login", json={"username": username, "password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return client


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Test client logged in as alice (user 1)."""
    return _login(app, "alice")


@pytest.fixture
def other_client(app):
    """Test client logged in as bob (user 2)."""
    return _login(app, "bob")


@pytest.fixture
def guest_client(app):
    """Test client in guest mode."""
    client = app.test_client()
    resp = client.post("/api/guest")
    assert resp.status_code == 201
    return client


@pytest.fixture
def db(app):
    """Direct database access for store tests (do not mix with client requests)."""
    with app.app_context():
        from database import get_db
        yield get_db()
