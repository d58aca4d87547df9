"""
Shared fixtures for resource store tests.

Every test gets a fresh in-memory SQLite database wired into the real app,
and the Redis revocation list is replaced by an in-process set.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from store_helpers import in_memory_revocation, overridden_session, sqlite_session_factory

from petconnect_server.main import app


@pytest.fixture
async def session_factory():
    async with sqlite_session_factory() as factory:
        yield factory


@pytest.fixture
def revoked_jtis():
    with in_memory_revocation() as revoked:
        yield revoked


@pytest.fixture
async def test_app(session_factory, revoked_jtis):
    with overridden_session(app, session_factory):
        yield app


@pytest.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def make_client(test_app):
    """Factory for extra clients, one per logged-in organization."""
    clients: list[AsyncClient] = []

    def _make() -> AsyncClient:
        ac = AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test")
        clients.append(ac)
        return ac

    yield _make

    for ac in clients:
        await ac.aclose()
