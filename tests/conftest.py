"""
tests/conftest.py -- Shared fixtures for the user directory tests.

This module provides:
  - database / user_store / user_service: a fresh in-memory SQLite database per
    test for store and service unit tests (async fixtures, pytest-asyncio)
  - tokens: an AuthTokens with a fixed test secret
  - user_fields: factory for valid signup payloads
  - api_client: module-scoped TestClient running the real lifespan

The environment must be set before any api/ or core/ import: get_settings()
is cached on first call, and api/main.py reads it at import time. DEBUG lets
Settings auto-generate SECRET_KEY; DATABASE_URL points the real lifespan at
an in-memory database (one per TestClient context, since each lifespan run
builds a new engine).
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable, Iterator

os.environ.setdefault("DEBUG", "true")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.main import app
from auth.tokens import AuthTokens
from db.engine import Database
from users.service import UserService
from users.store import UserStore

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tokens() -> AuthTokens:
    return AuthTokens(TEST_SECRET)


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    """In-memory database with every table created. Disposed after the test."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def user_store(database: Database) -> UserStore:
    return UserStore(database)


@pytest.fixture
def user_service(user_store: UserStore, tokens: AuthTokens) -> UserService:
    return UserService(user_store, tokens)


@pytest.fixture
def user_fields() -> Callable[..., dict]:
    """Return a factory for complete signup payloads. Keyword args override defaults."""

    def _make(**overrides) -> dict:
        fields = {
            "email": "a@x.com",
            "password": "p1",
            "first_name": "A",
            "last_name": "Lovelace",
            "country": "UK",
            "city": "London",
            "phone_number": "+44 20 0000 0000",
            "position": "Analyst",
        }
        fields.update(overrides)
        return fields

    return _make


# ---------------------------------------------------------------------------
# Integration fixture -- one TestClient per test module
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Iterator[TestClient]:
    """Yield a TestClient over the real app and lifespan.

    Each module gets its own lifespan run and therefore its own empty
    in-memory database.
    """
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client
