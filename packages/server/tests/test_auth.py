"""
Tests for Authentication and Authorization.

Covers:
- Password hashing and JWT creation, decoding, revocation
- CSRF middleware and security headers middleware
- Registration: pending organization, duplicate email rejected
- Login / logout / session lookup
- Verification gate on catalog mutations
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import jwt as pyjwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import func, select

from store_helpers import ARTICLE, PASSWORD, login, ngo_payload, register, set_status

from petconnect_server.core.auth import (
    SESSION_COOKIE,
    AuthenticatedOrg,
    create_jwt,
    decode_jwt,
    generate_csrf_token,
    hash_password,
    require_verified,
    verify_password,
)
from petconnect_server.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware, SECURITY_HEADERS
from petconnect_server.models.organization import Organization
from petconnect_server.models.user import User


# ---------------------------------------------------------------------------
# Unit Tests: Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_hash_and_verify(self):
        password = "MySecureP@ssw0rd!"
        hashed = hash_password(password)
        assert hashed != password
        assert verify_password(password, hashed)

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_different_hashes_for_same_password(self):
        """bcrypt uses random salt, so hashes differ."""
        h1 = hash_password("same")
        h2 = hash_password("same")
        assert h1 != h2
        assert verify_password("same", h1)
        assert verify_password("same", h2)


# ---------------------------------------------------------------------------
# Unit Tests: JWT
# ---------------------------------------------------------------------------

class TestJWT:
    def test_create_and_decode(self):
        uid, oid = uuid.uuid4(), uuid.uuid4()
        token, jti = create_jwt(user_id=uid, org_id=oid)
        payload = decode_jwt(token)
        assert payload["sub"] == str(uid)
        assert payload["org"] == str(oid)
        assert payload["jti"] == jti

    def test_expired_jwt_raises(self):
        token, _ = create_jwt(
            user_id=uuid.uuid4(), org_id=uuid.uuid4(), expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_jwt(token)

    def test_tampered_jwt_raises(self):
        token, _ = create_jwt(user_id=uuid.uuid4(), org_id=uuid.uuid4())
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(pyjwt.PyJWTError):
            decode_jwt(tampered)


class TestCSRFToken:
    def test_generates_unique_tokens(self):
        t1 = generate_csrf_token()
        t2 = generate_csrf_token()
        assert t1 != t2
        assert len(t1) > 20


# ---------------------------------------------------------------------------
# Integration Tests: Middleware
# ---------------------------------------------------------------------------

class TestSecurityHeadersMiddleware:
    def test_headers_present(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        client = TestClient(app)
        resp = client.get("/test")
        assert resp.status_code == 200
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers.get(header) == value


class TestCSRFMiddleware:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(CSRFMiddleware)

        @app.get("/test")
        async def get_test():
            return {"ok": True}

        @app.post("/test")
        async def post_test():
            return {"ok": True}

        @app.post("/auth/login")
        async def login_test():
            return {"ok": True}

        return app

    def test_get_passes_without_csrf(self):
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: "some-jwt"})
        resp = client.get("/test")
        assert resp.status_code == 200

    def test_post_without_session_cookie_passes(self):
        """No session cookie = not a browser session, skip CSRF."""
        client = TestClient(self._make_app())
        resp = client.post("/test")
        assert resp.status_code == 200

    def test_post_with_session_but_no_csrf_fails(self):
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: "some-jwt"})
        resp = client.post("/test")
        assert resp.status_code == 403
        assert "CSRF" in resp.json()["detail"]

    def test_post_with_matching_csrf_passes(self):
        csrf_token = "test-csrf-token"
        client = TestClient(
            self._make_app(),
            cookies={SESSION_COOKIE: "some-jwt", "pc_csrf": csrf_token},
        )
        resp = client.post("/test", headers={"X-CSRF-Token": csrf_token})
        assert resp.status_code == 200

    def test_post_with_mismatched_csrf_fails(self):
        client = TestClient(
            self._make_app(),
            cookies={SESSION_COOKIE: "some-jwt", "pc_csrf": "token-a"},
        )
        resp = client.post("/test", headers={"X-CSRF-Token": "token-b"})
        assert resp.status_code == 403

    def test_login_is_exempt(self):
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: "stale-jwt"})
        resp = client.post("/auth/login")
        assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Integration Tests: Registration
# ---------------------------------------------------------------------------

class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_creates_pending_org_without_session(self, client):
        org = await register(client, "caosemfome@test.com")
        assert org["status"] == "pending"
        assert org["contact_email"] == "caosemfome@test.com"
        assert "password" not in org
        assert SESSION_COOKIE not in client.cookies

        resp = await client.get("/auth/me")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, client, session_factory):
        await register(client, "caosemfome@test.com")
        async with session_factory() as session:
            user = (await session.execute(select(User))).scalar_one()
        assert user.password_hash != PASSWORD
        assert verify_password(PASSWORD, user.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts_without_side_effects(self, client, session_factory):
        await register(client, "caosemfome@test.com")

        resp = await client.post(
            "/auth/register", json=ngo_payload("caosemfome@test.com", name="Outra ONG")
        )
        assert resp.status_code == 409

        async with session_factory() as session:
            org_count = (await session.execute(select(func.count()).select_from(Organization))).scalar_one()
            user_count = (await session.execute(select(func.count()).select_from(User))).scalar_one()
        assert org_count == 1
        assert user_count == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_ignores_case(self, client, session_factory):
        await register(client, "ngo@test.com")

        resp = await client.post("/auth/register", json=ngo_payload("NGO@test.com", name="Outra ONG"))
        assert resp.status_code == 409

        async with session_factory() as session:
            org_count = (await session.execute(select(func.count()).select_from(Organization))).scalar_one()
        assert org_count == 1

    @pytest.mark.asyncio
    async def test_email_is_stored_lowercase(self, client):
        org = await register(client, "CaoSemFome@Test.com")
        assert org["contact_email"] == "caosemfome@test.com"

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, client):
        resp = await client.post(
            "/auth/register", json=ngo_payload("caosemfome@test.com", password="short")
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, client):
        resp = await client.post("/auth/register", json=ngo_payload("not-an-email"))
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Integration Tests: Login / logout / session
# ---------------------------------------------------------------------------

class TestSession:
    @pytest.mark.asyncio
    async def test_login_sets_cookies_and_returns_org(self, client):
        registered = await register(client, "caosemfome@test.com")
        org = await login(client, "caosemfome@test.com")
        assert org["id"] == registered["id"]
        assert SESSION_COOKIE in client.cookies

        resp = await client.get("/auth/me")
        assert resp.status_code == 200
        assert resp.json()["organization"]["id"] == registered["id"]

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, client):
        await register(client, "caosemfome@test.com")

        wrong = await client.post(
            "/auth/login", json={"email": "caosemfome@test.com", "password": "wrong-password"}
        )
        unknown = await client.post(
            "/auth/login", json={"email": "nobody@test.com", "password": PASSWORD}
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert SESSION_COOKIE not in client.cookies

    @pytest.mark.asyncio
    async def test_login_email_is_case_insensitive(self, client):
        registered = await register(client, "ngo@test.com")
        org = await login(client, "Ngo@Test.COM")
        assert org["id"] == registered["id"]

    @pytest.mark.asyncio
    async def test_pending_org_can_log_in(self, client):
        await register(client, "focinhos@test.com")
        org = await login(client, "focinhos@test.com")
        assert org["status"] == "pending"

    @pytest.mark.asyncio
    async def test_logout_revokes_session(self, client, revoked_jtis):
        await register(client, "caosemfome@test.com")
        await login(client, "caosemfome@test.com")
        token = client.cookies[SESSION_COOKIE]

        resp = await client.post("/auth/logout")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logged out"
        assert decode_jwt(token)["jti"] in revoked_jtis

        # Replaying the old cookie no longer works
        resp = await client.get("/auth/me", headers={"Cookie": f"{SESSION_COOKIE}={token}"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session(self, client):
        resp = await client.post("/auth/logout")
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_api_requires_session(self, client):
        resp = await client.get("/api/v1/organizations")
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Verification gate
# ---------------------------------------------------------------------------

class TestVerificationGate:
    def _mock_auth(self, status: str) -> AuthenticatedOrg:
        user = MagicMock()
        user.id = uuid.uuid4()
        org = MagicMock()
        org.id = uuid.uuid4()
        org.status = status
        return AuthenticatedOrg(user=user, org=org)

    @pytest.mark.asyncio
    async def test_verified_passes(self):
        auth = self._mock_auth("verified")
        assert await require_verified(auth) is auth

    @pytest.mark.asyncio
    async def test_pending_and_rejected_refused(self):
        for status in ("pending", "rejected"):
            with pytest.raises(Exception) as exc_info:
                await require_verified(self._mock_auth(status))
            assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_pending_org_cannot_add_resources(self, client, session_factory):
        await register(client, "focinhos@test.com")
        await login(client, "focinhos@test.com")

        resp = await client.post("/api/v1/resources/articles", json=ARTICLE)
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_rejected_org_cannot_add_resources(self, client, session_factory):
        org = await register(client, "focinhos@test.com")
        await set_status(session_factory, org["id"], "rejected")
        await login(client, "focinhos@test.com")

        resp = await client.post("/api/v1/resources/articles", json=ARTICLE)
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Unit Tests: JWT Revocation (mocked Redis)
# ---------------------------------------------------------------------------

class TestJWTRevocation:
    @pytest.mark.asyncio
    async def test_revoke_and_check(self):
        mock_redis = AsyncMock()
        mock_redis.setex = AsyncMock()
        mock_redis.exists = AsyncMock(return_value=1)

        with patch("petconnect_server.core.revocation.get_redis", return_value=mock_redis):
            from petconnect_server.core.revocation import is_jwt_revoked, revoke_jwt

            await revoke_jwt("test-jti-123", ttl_seconds=3600)
            mock_redis.setex.assert_called_once_with("pc:jwt:revoked:test-jti-123", 3600, "1")

            result = await is_jwt_revoked("test-jti-123")
            assert result is True

    @pytest.mark.asyncio
    async def test_non_revoked_jwt(self):
        mock_redis = AsyncMock()
        mock_redis.exists = AsyncMock(return_value=0)

        with patch("petconnect_server.core.revocation.get_redis", return_value=mock_redis):
            from petconnect_server.core.revocation import is_jwt_revoked

            result = await is_jwt_revoked("non-existent-jti")
            assert result is False
