import os

# Must be set before the application module builds its settings.
os.environ["USE_MOCK_DB"] = "true"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from contextlib import asynccontextmanager
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from pointart_api.api.main import app
from pointart_api.core.deps import get_client_scope, get_data_client
from pointart_api.db.mock_client import MockDataClient

ADMIN_EMAIL = "owner@pointarthub.com"
USER_EMAIL = "clerk@pointarthub.com"
PASSWORD = "secret123"


@pytest.fixture
def db() -> MockDataClient:
    """A fresh in-memory store for one test."""
    return MockDataClient()


@pytest.fixture
def client(db):
    @asynccontextmanager
    async def scope():
        yield db

    app.dependency_overrides[get_data_client] = lambda: db
    app.dependency_overrides[get_client_scope] = lambda: scope
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client: TestClient, email: str, full_name: str) -> Dict[str, str]:
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": PASSWORD, "full_name": full_name},
    )
    assert resp.status_code == 201, resp.text
    tokens = client.post("/api/v1/auth/login", data={"username": email, "password": PASSWORD}).json()
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def admin_headers(client) -> Dict[str, str]:
    # The first account on an empty store becomes admin.
    return register_and_login(client, ADMIN_EMAIL, "Shop Owner")


@pytest.fixture
def user_headers(client, admin_headers) -> Dict[str, str]:
    return register_and_login(client, USER_EMAIL, "Counter Clerk")
