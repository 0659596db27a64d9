"""
tests/conftest.py -- Shared test fixtures for Heron integration tests.

This module provides:
  - make_test_store(): isolated in-memory UserStore per test module
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - api_client: TestClient with an admin JWT for API integration tests
  - web_client: TestClient with follow_redirects=False for web route tests
  - settings_env: set env vars for one test and rebuild the Settings singleton

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("AUTO_MIGRATE", "false")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.models import AdminUser
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings

ADMIN_EMAIL = "admin@heron.test"
BASE_ADMIN_EMAIL = "owner@heron.test"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory UserStore.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'api', 'web').
    """
    return UserStore(
        db_url=f"sqlite:///file:test_heron_{db_suffix}?mode=memory&cache=shared&uri=true",
        create_schema=True,
    )


def _seed_admin(store: UserStore, email: str = ADMIN_EMAIL) -> tuple[int, str]:
    """Put `email` on the allow-list, create its users row, and return (user_id, jwt)."""
    store.create_admin_user(AdminUser(email=email, name="Test Admin"))
    store.upsert_base_admin(BASE_ADMIN_EMAIL)
    uid = store.upsert_user(email, f"local:{email}")
    token = create_access_token(user_id=uid, email=email, role="admin", expire_seconds=3600)
    return uid, token


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    Skips migrations and wires the pre-created test store into app.state.
    The OAuth registry is a MagicMock so no test can reach Google.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.oauth = MagicMock()
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, UserStore], None, None]:
    """Yield (client, token, store) for API integration tests."""
    store = make_test_store(f"api_{request.module.__name__}")
    _uid, token = _seed_admin(store)

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, store

    store.close()


@pytest.fixture(scope="module")
def web_client(request) -> Generator[tuple[TestClient, str, UserStore], None, None]:
    """Yield (client, token, store) for web route integration tests.

    follow_redirects=False is essential for web route tests: we assert on
    redirect *locations* (e.g. 302 to /login), which are invisible once
    the client follows the redirect.
    """
    store = make_test_store(f"web_{request.module.__name__}")
    _uid, token = _seed_admin(store)

    app.router.lifespan_context = _patch_lifespan(store)

    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client, token, store

    store.close()


@pytest.fixture
def settings_env(monkeypatch) -> Generator[Callable[..., None], None, None]:
    """Set environment variables and rebuild the cached Settings.

    Usage:
        def test_x(settings_env):
            settings_env(IMAGE_BASE_URL="https://cdn.example.com")
    """

    def _apply(**env: str) -> None:
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield _apply
    get_settings.cache_clear()
