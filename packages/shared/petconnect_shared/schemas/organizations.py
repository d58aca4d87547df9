"""
Organization-related Pydantic schemas shared between server and client.

Covers: NGO registration, organization reads, verification status updates,
and the aggregate stats lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from .common import OrganizationStatus, RequestStatus, ResourceStatus, ResourceType


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrganizationProfile(BaseModel):
    """Profile fields an NGO supplies when registering."""

    name: str = Field(..., min_length=1, max_length=200, description="NGO display name")
    cnpj: str = Field(..., min_length=1, max_length=32, description="Registration number")
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=2, max_length=50)
    contact_email: EmailStr = Field(..., description="Login identity, unique")
    contact_phone: str = Field(..., min_length=1, max_length=32)


class OrgRegisterRequest(OrganizationProfile):
    password: str = Field(..., min_length=8, max_length=128)


class OrgStatusUpdate(BaseModel):
    status: OrganizationStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrganizationRead(BaseModel):
    id: uuid.UUID
    name: str
    cnpj: str
    city: str
    state: str
    contact_email: str
    contact_phone: str
    status: OrganizationStatus
    owner_user_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}

    @property
    def is_verified(self) -> bool:
        return self.status == OrganizationStatus.VERIFIED


class OrganizationStats(BaseModel):
    """Counts for one organization, as returned by the stats lookup."""

    organization_id: uuid.UUID
    resources: dict[ResourceType, dict[ResourceStatus, int]]
    requests_received: dict[RequestStatus, int]
    requests_made: dict[RequestStatus, int]

    @property
    def total_resources(self) -> int:
        return sum(sum(by_status.values()) for by_status in self.resources.values())
