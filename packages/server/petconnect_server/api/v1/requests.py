"""
Resource request endpoints: creation, listing and the approval transition.

pending → approved | rejected (terminal). Approving marks the requested
resource donated in the same transaction.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.auth import AuthenticatedOrg, get_authenticated_org, require_verified
from petconnect_server.core.database import get_session
from petconnect_server.services.requests import create_request, list_requests, transition_request
from petconnect_shared.schemas.requests import (
    RequestTransition,
    ResourceRequestCreate,
    ResourceRequestRead,
)

router = APIRouter()


@router.get("", response_model=List[ResourceRequestRead])
async def list_requests_endpoint(
    donating_organization_id: Optional[uuid.UUID] = None,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    """Requests where the session's organization is donor or requester."""
    return await list_requests(session, auth, donating_organization_id)


@router.post("", response_model=ResourceRequestRead, status_code=201)
async def create_request_endpoint(
    body: ResourceRequestCreate,
    auth: AuthenticatedOrg = Depends(require_verified),
    session: AsyncSession = Depends(get_session),
):
    return await create_request(session, body, auth)


@router.post("/{requestId}/transition", response_model=ResourceRequestRead)
async def transition_request_endpoint(
    requestId: uuid.UUID,
    body: RequestTransition,
    auth: AuthenticatedOrg = Depends(require_verified),
    session: AsyncSession = Depends(get_session),
):
    """Approve or reject a pending request. Donor only."""
    return await transition_request(session, requestId, body.to_status, auth)
