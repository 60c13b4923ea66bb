"""
tests/conftest.py -- Shared test fixtures for UserDirectory.

This module provides:
  - store:        a freshly seeded UserStore (unit tests)
  - api_client:   (TestClient, demo admin token) over the full ASGI app
  - web_client:   same, but follow_redirects=False for web route tests

Each client fixture wires its own seeded store into app.state through a
patched lifespan, so tests that create or delete users never leak into
each other.

The DEBUG env var must be set before any auth/core import so get_settings()
auto-generates SECRET_KEY rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.tokens import create_access_token
from directory.store import DEMO_EMAIL, UserStore


def _patch_lifespan(store: UserStore):
    """Return a lifespan that installs the given store instead of building one."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        yield

    return test_lifespan


def _demo_token(store: UserStore) -> str:
    demo = store.get_by_email(DEMO_EMAIL)
    assert demo is not None
    return create_access_token(demo.id)


@pytest.fixture
def store() -> UserStore:
    """A UserStore holding the standard eight seed records."""
    s = UserStore()
    s.seed()
    return s


@pytest.fixture
def api_client(store: UserStore) -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, token) where token belongs to the seeded demo admin."""
    app.router.lifespan_context = _patch_lifespan(store)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, _demo_token(store)


@pytest.fixture
def web_client(store: UserStore) -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, token) with redirects left unfollowed.

    Web tests assert on redirect Location headers, which disappear once the
    client follows them.
    """
    app.router.lifespan_context = _patch_lifespan(store)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client, _demo_token(store)
