"""
Resource endpoints for the three collections (medicines, rations, articles).

The collection name is the path's first segment and selects the variant;
bodies are validated against that variant's schema. Status is assigned by the
store and cannot be written through these routes.
"""

from __future__ import annotations

import uuid
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.auth import AuthenticatedOrg, get_authenticated_org, require_verified
from petconnect_server.core.database import get_session
from petconnect_server.services.resources import (
    add_resource,
    get_resource_or_404,
    list_resources,
    parse_payload,
    to_read,
    update_resource,
)
from petconnect_shared.schemas.common import ResourceType
from petconnect_shared.schemas.resources import Resource

router = APIRouter()


@router.get("/{resource_type}", response_model=List[Resource])
async def list_resources_endpoint(
    resource_type: ResourceType,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    """Full collection, every organization and every status."""
    rows = await list_resources(session, resource_type)
    return [to_read(resource_type, row) for row in rows]


@router.get("/{resource_type}/{resourceId}", response_model=Resource)
async def get_resource_endpoint(
    resource_type: ResourceType,
    resourceId: uuid.UUID,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    row = await get_resource_or_404(session, resource_type, resourceId)
    return to_read(resource_type, row)


@router.post("/{resource_type}", response_model=Resource, status_code=201)
async def add_resource_endpoint(
    resource_type: ResourceType,
    body: dict[str, Any] = Body(...),
    auth: AuthenticatedOrg = Depends(require_verified),
    session: AsyncSession = Depends(get_session),
):
    """List a new resource for the session's organization."""
    payload = parse_payload(resource_type, body)
    row = await add_resource(session, resource_type, payload, auth)
    return to_read(resource_type, row)


@router.put("/{resource_type}/{resourceId}", response_model=Resource)
async def update_resource_endpoint(
    resource_type: ResourceType,
    resourceId: uuid.UUID,
    body: dict[str, Any] = Body(...),
    auth: AuthenticatedOrg = Depends(require_verified),
    session: AsyncSession = Depends(get_session),
):
    """Replace the editable fields of an owned resource."""
    payload = parse_payload(resource_type, body)
    row = await update_resource(session, resource_type, resourceId, payload, auth)
    return to_read(resource_type, row)
