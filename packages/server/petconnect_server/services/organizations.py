"""
Organization service — registration, reads, verification and stats.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from petconnect_server.core.auth import hash_password
from petconnect_server.models.organization import Organization
from petconnect_server.models.resource_request import ResourceRequest
from petconnect_server.models.resources import RESOURCE_MODELS
from petconnect_server.models.user import User
from petconnect_shared.schemas.common import (
    ORGANIZATION_TRANSITIONS,
    OrganizationStatus,
    RequestStatus,
    ResourceStatus,
)
from petconnect_shared.schemas.organizations import OrganizationStats, OrgRegisterRequest

log = structlog.get_logger()


async def register_organization(
    req: OrgRegisterRequest, session: AsyncSession
) -> Organization:
    """Create a pending organization and the credential it logs in with."""
    email = str(req.contact_email).lower()
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.first():
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(email=email, password_hash=hash_password(req.password))
    session.add(user)
    await session.flush()

    org = Organization(
        name=req.name,
        cnpj=req.cnpj,
        city=req.city,
        state=req.state,
        contact_email=email,
        contact_phone=req.contact_phone,
        status=OrganizationStatus.PENDING.value,
        owner_user_id=user.id,
    )
    session.add(org)
    await session.flush()

    log.info("org.registered", org_id=str(org.id), email=email)
    return org


async def list_organizations(session: AsyncSession) -> list[Organization]:
    result = await session.execute(select(Organization).order_by(Organization.created_at))
    return list(result.scalars().all())


async def get_organization_or_404(
    org_id: uuid.UUID, session: AsyncSession
) -> Organization:
    org = await session.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


async def set_organization_status(
    org: Organization, status: OrganizationStatus, session: AsyncSession
) -> Organization:
    """Administrative verification decision."""
    current = OrganizationStatus(org.status)
    if status not in ORGANIZATION_TRANSITIONS[current]:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot move organization from '{current.value}' to '{status.value}'",
        )
    org.status = status.value
    session.add(org)
    await session.flush()
    log.info("org.status_changed", org_id=str(org.id), status=status.value)
    return org


async def organization_stats(
    org_id: uuid.UUID, session: AsyncSession
) -> OrganizationStats:
    """Resource counts by type and status, and request counts by status."""
    resources = {}
    for resource_type, model in RESOURCE_MODELS.items():
        counts = {status: 0 for status in ResourceStatus}
        result = await session.execute(
            select(model.status, func.count())
            .where(model.organization_id == org_id)
            .group_by(model.status)
        )
        for status, count in result.all():
            counts[ResourceStatus(status)] = count
        resources[resource_type] = counts

    async def _request_counts(column) -> dict[RequestStatus, int]:
        counts = {status: 0 for status in RequestStatus}
        result = await session.execute(
            select(ResourceRequest.status, func.count())
            .where(column == org_id)
            .group_by(ResourceRequest.status)
        )
        for status, count in result.all():
            counts[RequestStatus(status)] = count
        return counts

    return OrganizationStats(
        organization_id=org_id,
        resources=resources,
        requests_received=await _request_counts(ResourceRequest.donating_organization_id),
        requests_made=await _request_counts(ResourceRequest.requesting_organization_id),
    )
