"""
Resource request service: creation, listing, and the approval state machine.

pending -> approved | rejected, both terminal. Approving marks the requested
resource donated in the same transaction; nothing else may do so.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from petconnect_server.core.auth import AuthenticatedOrg
from petconnect_server.models.organization import Organization
from petconnect_server.models.resource_request import ResourceRequest
from petconnect_server.models.resources import RESOURCE_MODELS
from petconnect_shared.schemas.common import (
    REQUEST_TRANSITIONS,
    RESOURCE_TRANSITIONS,
    RequestStatus,
    ResourceStatus,
    ResourceType,
)
from petconnect_shared.schemas.requests import ResourceRequestCreate

log = structlog.get_logger()


async def get_request_or_404(
    session: AsyncSession, request_id: uuid.UUID, *, for_update: bool = False
) -> ResourceRequest:
    req = await session.get(ResourceRequest, request_id, with_for_update=for_update)
    if not req:
        raise HTTPException(status_code=404, detail="Request not found")
    return req


async def create_request(
    session: AsyncSession,
    req_in: ResourceRequestCreate,
    auth: AuthenticatedOrg,
) -> ResourceRequest:
    if req_in.requesting_organization_id != auth.org_id:
        raise HTTPException(
            status_code=403, detail="Requests can only be made on behalf of your own organization"
        )
    if req_in.donating_organization_id == auth.org_id:
        raise HTTPException(status_code=409, detail="Cannot request your own resource")

    donor = await session.get(Organization, req_in.donating_organization_id)
    if not donor:
        raise HTTPException(status_code=404, detail="Donating organization not found")

    model = RESOURCE_MODELS[req_in.resource_type]
    resource = await session.get(model, req_in.resource_id)
    if not resource or resource.organization_id != donor.id:
        raise HTTPException(status_code=404, detail="Resource not found")
    if resource.status != ResourceStatus.AVAILABLE.value:
        raise HTTPException(status_code=409, detail="Resource is no longer available")

    duplicate = await session.execute(
        select(ResourceRequest.id).where(
            ResourceRequest.resource_id == resource.id,
            ResourceRequest.resource_type == req_in.resource_type.value,
            ResourceRequest.requesting_organization_id == auth.org_id,
            ResourceRequest.status == RequestStatus.PENDING.value,
        )
    )
    if duplicate.first():
        raise HTTPException(status_code=409, detail="You already have a pending request for this resource")

    new_request = ResourceRequest(
        resource_id=resource.id,
        resource_type=req_in.resource_type.value,
        donating_organization_id=donor.id,
        requesting_organization_id=auth.org_id,
        status=RequestStatus.PENDING.value,
    )
    session.add(new_request)
    await session.flush()
    await session.refresh(new_request)

    log.info(
        "request.created",
        request_id=str(new_request.id),
        resource_type=new_request.resource_type,
        resource_id=str(resource.id),
        donor=str(donor.id),
        requester=str(auth.org_id),
    )
    return new_request


async def list_requests(
    session: AsyncSession,
    auth: AuthenticatedOrg,
    donating_organization_id: Optional[uuid.UUID] = None,
) -> list[ResourceRequest]:
    """Requests the session can see: those where it is donor or requester."""
    query = select(ResourceRequest).where(
        or_(
            ResourceRequest.donating_organization_id == auth.org_id,
            ResourceRequest.requesting_organization_id == auth.org_id,
        )
    )
    if donating_organization_id is not None:
        query = query.where(ResourceRequest.donating_organization_id == donating_organization_id)
    result = await session.execute(query.order_by(ResourceRequest.created_at))
    return list(result.scalars().all())


async def transition_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    to_status: RequestStatus,
    auth: AuthenticatedOrg,
) -> ResourceRequest:
    """Approve or reject a pending request (donor only)."""
    req = await get_request_or_404(session, request_id, for_update=True)
    if req.donating_organization_id != auth.org_id:
        raise HTTPException(
            status_code=403, detail="Only the donating organization can answer this request"
        )

    current = RequestStatus(req.status)
    if to_status not in REQUEST_TRANSITIONS[current]:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot transition request from '{current.value}' to '{to_status.value}'",
        )

    if to_status == RequestStatus.APPROVED:
        model = RESOURCE_MODELS[ResourceType(req.resource_type)]
        resource = await session.get(model, req.resource_id, with_for_update=True)
        if not resource:
            raise HTTPException(status_code=404, detail="Resource not found")
        if ResourceStatus.DONATED not in RESOURCE_TRANSITIONS[ResourceStatus(resource.status)]:
            raise HTTPException(status_code=409, detail="Resource is no longer available")
        resource.status = ResourceStatus.DONATED.value
        session.add(resource)

    req.status = to_status.value
    session.add(req)
    await session.flush()
    await session.refresh(req)

    log.info(
        "request.approved" if to_status == RequestStatus.APPROVED else "request.rejected",
        request_id=str(req.id),
        resource_type=req.resource_type,
        resource_id=str(req.resource_id),
    )
    return req
