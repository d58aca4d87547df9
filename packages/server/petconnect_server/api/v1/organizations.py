"""
Organization API endpoints.

GET /api/v1/organizations            — List every organization
GET /api/v1/organizations/{orgId}    — Get one organization
GET /api/v1/organizations/{orgId}/stats — Resource and request counts
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.auth import AuthenticatedOrg, get_authenticated_org
from petconnect_server.core.database import get_session
from petconnect_server.services import organizations as org_service
from petconnect_shared.schemas.organizations import OrganizationRead, OrganizationStats

router = APIRouter()


@router.get("", response_model=list[OrganizationRead])
async def list_organizations(
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    orgs = await org_service.list_organizations(session)
    return [OrganizationRead.model_validate(org) for org in orgs]


@router.get("/{orgId}", response_model=OrganizationRead)
async def get_organization(
    orgId: uuid.UUID,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    org = await org_service.get_organization_or_404(orgId, session)
    return OrganizationRead.model_validate(org)


@router.get("/{orgId}/stats", response_model=OrganizationStats)
async def get_organization_stats(
    orgId: uuid.UUID,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    """Resource counts by type and status, request counts by status."""
    await org_service.get_organization_or_404(orgId, session)
    return await org_service.organization_stats(orgId, session)
