"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import os
import tempfile
from typing import Generator

# Settings are read once at import time
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["LOG_FORMAT"] = "text"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="cashcrash-uploads-")
# Unit tests run without a database; the SQL backend tests opt back in
SQL_TEST_DATABASE_URL = os.environ.pop("DATABASE_URL", None)

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from cashcrash.core.security import SESSION_COOKIE, create_session_token
from cashcrash.repositories import MemoryStorage, set_storage
from cashcrash.services.seed import seed_demo_data


# Configure asyncio
pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def storage() -> MemoryStorage:
    """Empty in-memory store."""
    return MemoryStorage()


@pytest.fixture
def seeded_storage() -> MemoryStorage:
    """In-memory store loaded with the demo market."""
    store = MemoryStorage()
    asyncio.run(seed_demo_data(store))
    return store


@pytest_asyncio.fixture
async def market() -> MemoryStorage:
    """Demo market for async unit tests."""
    store = MemoryStorage()
    await seed_demo_data(store)
    return store


@pytest.fixture
def client(seeded_storage: MemoryStorage) -> Generator[TestClient, None, None]:
    """Create a test client for the API app backed by the demo market."""
    from cashcrash.api.app import create_api_app

    set_storage(seeded_storage)
    app = create_api_app()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    set_storage(None)


def login_as_admin(client: TestClient) -> None:
    """Replace the client's session cookie with an admin session."""
    client.cookies.set(SESSION_COOKIE, create_session_token("admin"))


def login_as_team(client: TestClient, team_id: int) -> None:
    """Replace the client's session cookie with a team session."""
    client.cookies.set(SESSION_COOKIE, create_session_token("team", team_id=team_id))


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    login_as_admin(client)
    return client


@pytest.fixture
def team_client(client: TestClient) -> TestClient:
    """Client logged in as team 1 (100000.00 cash)."""
    login_as_team(client, 1)
    return client
