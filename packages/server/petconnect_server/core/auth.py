"""
Authentication and authorization for the resource store.

Supports:
- Email/password login for NGO accounts (bcrypt)
- JWT session cookie with Redis revocation list
- Dependencies resolving the session's organization and enforcing
  verification status
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from petconnect_server.core.config import get_settings
from petconnect_server.core.database import get_session
from petconnect_server.core.revocation import is_jwt_revoked
from petconnect_server.models.organization import Organization
from petconnect_server.models.user import User
from petconnect_shared.schemas.common import OrganizationStatus

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "pc_session"
CSRF_COOKIE = "pc_csrf"
CSRF_HEADER = "X-CSRF-Token"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "org": str(org_id),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthenticatedOrg:
    """The organization owning the current session, plus its credential record."""

    def __init__(self, user: User, org: Organization, jti: str | None = None):
        self.user = user
        self.org = org
        self.jti = jti
        self.user_id = user.id
        self.org_id = org.id

    @property
    def is_verified(self) -> bool:
        return self.org.status == OrganizationStatus.VERIFIED.value


async def authenticate_credentials(
    email: str, password: str, session: AsyncSession
) -> tuple[User, Organization]:
    """Resolve an email/password pair to its organization.

    Emails match case-insensitively. Unknown email and wrong password
    produce the same 401.
    """
    email = email.strip().lower()
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        log.warning("auth.login_failure", email=email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    result = await session.execute(
        select(Organization).where(Organization.owner_user_id == user.id)
    )
    org = result.scalar_one_or_none()
    if not org:
        log.warning("auth.login_failure", email=email, reason="no_organization")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return user, org


async def get_authenticated_org(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedOrg:
    """Main authentication dependency: resolves the JWT session cookie."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        raise HTTPException(status_code=401, detail="Session has been revoked")

    user = await session.get(User, uuid.UUID(payload["sub"]))
    org = await session.get(Organization, uuid.UUID(payload["org"]))
    if not user or not org or org.owner_user_id != user.id:
        raise HTTPException(status_code=401, detail="Session owner not found")

    auth = AuthenticatedOrg(user=user, org=org, jti=jti)
    request.state.auth = auth
    return auth


async def require_verified(
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
) -> AuthenticatedOrg:
    """Mutations on the catalog are reserved to verified organizations."""
    if not auth.is_verified:
        raise HTTPException(status_code=403, detail="Organization is awaiting verification")
    return auth
