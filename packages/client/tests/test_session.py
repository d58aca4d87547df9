"""Tests for the session manager."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from client_helpers import PASSWORD, profile

from petconnect_client.errors import AuthError, NetworkError
from petconnect_client.session import SessionManager


@pytest.mark.asyncio
async def test_start_without_session(gateway):
    session = SessionManager(gateway)
    assert session.loading is True

    assert await session.start() is None
    assert session.user is None
    assert session.loading is False


@pytest.mark.asyncio
async def test_start_resumes_existing_session(gateway):
    await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)
    await gateway.login("caosemfome@test.com", PASSWORD)

    session = SessionManager(gateway)
    user = await session.start()
    assert user is not None
    assert session.user.contact_email == "caosemfome@test.com"


@pytest.mark.asyncio
async def test_start_tolerates_network_failure(gateway, monkeypatch):
    monkeypatch.setattr(gateway, "get_authenticated_user", AsyncMock(side_effect=NetworkError("down")))
    session = SessionManager(gateway)
    assert await session.start() is None
    assert session.loading is False


@pytest.mark.asyncio
async def test_failed_login_leaves_user_none(gateway):
    session = SessionManager(gateway)
    await session.start()

    with pytest.raises(AuthError):
        await session.login("ghost@test.com", "whatever-password")
    assert session.user is None
    assert not session.is_authenticated


@pytest.mark.asyncio
async def test_login_logout_notify_listeners(gateway):
    await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)
    session = SessionManager(gateway)
    seen = []

    async def _listener(user):
        seen.append(user.contact_email if user else None)

    session.subscribe(_listener)
    await session.login("caosemfome@test.com", PASSWORD)
    await session.logout()

    assert seen == ["caosemfome@test.com", None]
    assert session.user is None


@pytest.mark.asyncio
async def test_pending_org_awaits_approval(make_ngo):
    pending = await make_ngo("focinhos@test.com", verified=False, name="Focinhos Carentes")
    assert pending.session.is_authenticated
    assert pending.session.awaiting_approval

    verified = await make_ngo("caosemfome@test.com")
    assert not verified.session.awaiting_approval


@pytest.mark.asyncio
async def test_register_does_not_change_session(gateway):
    session = SessionManager(gateway)
    await session.start()
    org = await session.register_ngo(profile("focinhos@test.com", name="Focinhos Carentes"), PASSWORD)
    assert org.status == "pending"
    assert session.user is None


@pytest.mark.asyncio
async def test_failed_login_ends_previous_session(gateway):
    await gateway.register_ngo(profile("caosemfome@test.com"), PASSWORD)
    session = SessionManager(gateway)
    await session.login("caosemfome@test.com", PASSWORD)

    with pytest.raises(AuthError):
        await session.login("caosemfome@test.com", "not-the-password")
    assert session.user is None

    # The old cookies are gone, so nothing comes back on the next start
    assert await session.start() is None
    assert session.user is None
