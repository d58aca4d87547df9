"""
Shared fixtures for client tests.

The client talks to the real resource store app through httpx's
ASGITransport, backed by an in-memory SQLite database.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport

from store_helpers import in_memory_revocation, overridden_session, set_status, sqlite_session_factory
from client_helpers import PASSWORD, Ngo, profile

from petconnect_client.catalog import CatalogCache
from petconnect_client.gateway import ApiGateway
from petconnect_client.session import SessionManager
from petconnect_server.main import app


@pytest.fixture
async def session_factory():
    async with sqlite_session_factory() as factory:
        yield factory


@pytest.fixture
async def store(session_factory):
    with in_memory_revocation(), overridden_session(app, session_factory):
        yield app


@pytest.fixture
async def make_gateway(store):
    gateways: list[ApiGateway] = []

    async def _make() -> ApiGateway:
        gateway = ApiGateway("http://test", transport=ASGITransport(app=store))
        await gateway.open()
        gateways.append(gateway)
        return gateway

    yield _make

    for gateway in gateways:
        await gateway.close()


@pytest.fixture
async def gateway(make_gateway):
    return await make_gateway()


@pytest.fixture
def make_ngo(make_gateway, session_factory):
    """Register an NGO, optionally verify it, and log a fresh client stack in."""

    async def _make(email: str, *, verified: bool = True, **profile_fields) -> Ngo:
        gateway = await make_gateway()
        org = await gateway.register_ngo(profile(email, **profile_fields), PASSWORD)
        if verified:
            await set_status(session_factory, org.id, "verified")
        session = SessionManager(gateway)
        catalog = CatalogCache(gateway, session)
        await session.login(email, PASSWORD)
        return Ngo(gateway=gateway, session=session, catalog=catalog)

    return _make
