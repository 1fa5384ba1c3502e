"""
tests/conftest.py -- Shared test fixtures for Stockroom.

This module provides:
  - make_settings(): Settings with a fixed secret, bcrypt cost 4 and rate
    limiting off, pointed at an isolated in-memory database
  - engine: a fresh in-memory SQLAlchemy engine for store/service unit tests
  - user_store / item_store: repositories bound to that engine
  - row_count: raw per-table row count, for "no new row" assertions
  - auth_service / inventory_service: business layer over those stores
  - api_client: TestClient with a registered user's JWT for integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required for
the HTTP tests because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

No environment variables are touched: every app is built from an explicit
Settings object.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.engine import Engine

from api.main import create_app
from auth.hashing import BcryptHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import JWTTokenIssuer
from core.config import Settings
from core.database import make_engine
from inventory.service import InventoryService
from inventory.store import ItemStore

TEST_SECRET = "test-secret-key-that-is-definitely-long-enough"
TEST_USERNAME = "testuser"
TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "testpass123"

# Fixed instant for service tests that need a deterministic clock.
FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_settings(db_suffix: str, **overrides) -> Settings:
    """Build Settings for a test app backed by its own shared-memory database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'health').
    """
    values = {
        "secret_key": TEST_SECRET,
        "bcrypt_rounds": 4,
        "rate_limit_enabled": False,
        "database_url": f"sqlite:///file:test_{db_suffix}?mode=memory&cache=shared&uri=true",
    }
    values.update(overrides)
    return Settings(**values)


class FakeClock:
    """Settable clock for AuthService. Call it to read; assign .now to move it."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# ---------------------------------------------------------------------------
# Unit-level fixtures -- a fresh database per test
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = make_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def row_count(engine: Engine):
    """Return a callable counting every row of a table, soft-deleted rows included."""

    def count(table: str) -> int:
        with engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()  # noqa: S608 -- fixed test table names

    return count


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def item_store(engine: Engine) -> ItemStore:
    return ItemStore(engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_service(user_store: UserStore, clock: FakeClock) -> AuthService:
    return AuthService(
        store=user_store,
        hasher=BcryptHasher(rounds=4),
        tokens=JWTTokenIssuer(TEST_SECRET),
        token_duration=timedelta(hours=24),
        clock=clock,
    )


@pytest.fixture
def inventory_service(item_store: ItemStore) -> InventoryService:
    return InventoryService(item_store)


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient runs the real application factory and lifespan against an
    isolated in-memory database named after the requesting test module. The
    user is registered and logged in through the HTTP routes themselves, so
    the token is exactly what a real client would hold.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    app = create_app(make_settings(suffix))

    with TestClient(app, raise_server_exceptions=True) as client:
        resp = client.post(
            "/api/v1/auth/register",
            json={"username": TEST_USERNAME, "email": TEST_EMAIL, "password": TEST_PASSWORD},
        )
        assert resp.status_code == 201, resp.text
        uid = resp.json()["id"]

        resp = client.post("/api/v1/auth/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD})
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]

        yield client, token, uid
