"""
Authentication endpoints.

- NGO registration (creates a pending organization, no session)
- Email/password login issuing the JWT session + CSRF cookies
- Logout (revokes the JWT id) and the current-session lookup
"""

from __future__ import annotations

import jwt
import structlog
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    AuthenticatedOrg,
    authenticate_credentials,
    create_jwt,
    decode_jwt,
    generate_csrf_token,
    get_authenticated_org,
)
from petconnect_server.core.config import get_settings
from petconnect_server.core.database import get_session
from petconnect_server.core.revocation import revoke_jwt
from petconnect_server.services import organizations as org_service
from petconnect_shared.schemas.auth import LoginRequest, SessionResponse
from petconnect_shared.schemas.organizations import OrganizationRead, OrgRegisterRequest

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

# Cookie config
COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,  # allow non-HTTPS in dev
    "samesite": "lax",
    "path": "/",
    "max_age": settings.jwt_expire_minutes * 60,
}


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session JWT and CSRF cookies on a response."""
    response.set_cookie(key=SESSION_COOKIE, value=token, **COOKIE_KWARGS)
    response.set_cookie(key=CSRF_COOKIE, value=csrf, **{**COOKIE_KWARGS, "httponly": False})


@router.post("/register", response_model=OrganizationRead, status_code=201)
async def register(
    body: OrgRegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register an NGO. The organization starts pending and no session is opened."""
    org = await org_service.register_organization(body, session)
    return OrganizationRead.model_validate(org)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a JWT session."""
    user, org = await authenticate_credentials(str(body.email), body.password, session)

    token, _jti = create_jwt(user_id=user.id, org_id=org.id)
    _set_session_cookies(response, token, generate_csrf_token())

    log.info("auth.login_success", user_id=str(user.id), org_id=str(org.id))
    return SessionResponse(
        organization=OrganizationRead.model_validate(org),
        message="Login successful",
    )


@router.get("/me", response_model=SessionResponse)
async def me(auth: AuthenticatedOrg = Depends(get_authenticated_org)):
    """The organization owning the current session."""
    return SessionResponse(
        organization=OrganizationRead.model_validate(auth.org),
        message="Session active",
    )


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Invalidate the current session."""
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            payload = decode_jwt(token)
        except jwt.PyJWTError:
            payload = {}  # already invalid, just clear cookies
        jti = payload.get("jti")
        if jti:
            await revoke_jwt(jti)
            log.info("auth.logout", user_id=payload.get("sub"))

    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return {"message": "Logged out"}
