"""Authentication request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr

from .organizations import OrganizationRead


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SessionResponse(BaseModel):
    """Returned by login and by the session check."""
    organization: OrganizationRead
    message: str
