"""
Shared pytest fixtures: an app bound to a throwaway SQLite file.
"""

import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="vibrate-tests-"))
TEST_DB = _TEST_DIR / "test.db"

# Settings are read once, so the environment must be ready before any import
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SUPER_ADMIN_EMAIL"] = "root@example.com"
os.environ["SUPER_ADMIN_PASSWORD"] = "RootPass123"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from vibrate_monitor.core import security

# Fast hashes keep the suite quick
security.BCRYPT_ROUNDS = 4

SUPER_ADMIN = {"email": "root@example.com", "password": "RootPass123"}
DEFAULT_PASSWORD = "Secret123"


@pytest.fixture
def client():
    """Test client with a fresh database and the seeded super admin."""
    if TEST_DB.exists():
        TEST_DB.unlink()

    from main import app

    with TestClient(app) as test_client:
        yield test_client


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def root_token(client):
    return login(client, SUPER_ADMIN["email"], SUPER_ADMIN["password"])


@pytest.fixture
def make_user(client, root_token):
    """
    Register a user, optionally approve and re-role them.

    Returns (user_id, token or None).
    """
    def _make(email: str, role: str = "operator", approve: bool = True, name: str = "Test User"):
        response = client.post("/api/auth/register", json={
            "email": email,
            "password": DEFAULT_PASSWORD,
            "name": name,
            "role": role if role != "admin" else "operator",
        })
        assert response.status_code == 201, response.text
        user_id = response.json()["user"]["id"]

        if not approve:
            return user_id, None

        response = client.post(f"/api/admin/users/{user_id}/approve", headers=auth_header(root_token))
        assert response.status_code == 200, response.text

        if role == "admin":
            response = client.put(
                f"/api/admin/users/{user_id}/role",
                json={"role": "admin"},
                headers=auth_header(root_token)
            )
            assert response.status_code == 200, response.text

        return user_id, login(client, email)

    return _make
