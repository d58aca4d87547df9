"""
Resource service layer: CRUD over the three resource collections and the
server-side donation search.

Handles:
- Variant dispatch by resource type (medicines / rations / articles)
- Ownership checks on update
- Status bookkeeping: new resources start available; status is never
  client-writable (approval is the only way to mark a resource donated)
"""

from __future__ import annotations

import itertools
import uuid
from datetime import date
from typing import Any, Optional

import structlog
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from petconnect_server.core.auth import AuthenticatedOrg
from petconnect_server.models.resources import RESOURCE_MODELS, ResourceColumns
from petconnect_server.services.organizations import list_organizations
from petconnect_shared.board import DonationBoard, DonationFilters, build_donation_board
from petconnect_shared.schemas.common import ResourceStatus, ResourceType
from petconnect_shared.schemas.organizations import OrganizationRead
from petconnect_shared.schemas.resources import CREATE_SCHEMAS, READ_SCHEMAS

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_payload(resource_type: ResourceType, body: dict[str, Any]) -> BaseModel:
    """Validate a raw body against the create schema of its variant."""
    try:
        return CREATE_SCHEMAS[resource_type].model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False))


def to_read(resource_type: ResourceType, row: ResourceColumns):
    return READ_SCHEMAS[resource_type].model_validate(row)


async def get_resource(
    session: AsyncSession, resource_type: ResourceType, resource_id: uuid.UUID
) -> Optional[ResourceColumns]:
    return await session.get(RESOURCE_MODELS[resource_type], resource_id)


async def get_resource_or_404(
    session: AsyncSession, resource_type: ResourceType, resource_id: uuid.UUID
) -> ResourceColumns:
    row = await get_resource(session, resource_type, resource_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Resource not found")
    return row


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def list_resources(
    session: AsyncSession, resource_type: ResourceType
) -> list[ResourceColumns]:
    model = RESOURCE_MODELS[resource_type]
    result = await session.execute(select(model).order_by(model.created_at))
    return list(result.scalars().all())


async def add_resource(
    session: AsyncSession,
    resource_type: ResourceType,
    payload: BaseModel,
    auth: AuthenticatedOrg,
) -> ResourceColumns:
    model = RESOURCE_MODELS[resource_type]
    row = model(
        **payload.model_dump(mode="python"),
        organization_id=auth.org_id,
        status=ResourceStatus.AVAILABLE.value,
    )
    session.add(row)
    await session.flush()
    await session.refresh(row)

    log.info(
        "resource.created",
        resource_type=resource_type.value,
        resource_id=str(row.id),
        org_id=str(auth.org_id),
    )
    return row


async def update_resource(
    session: AsyncSession,
    resource_type: ResourceType,
    resource_id: uuid.UUID,
    payload: BaseModel,
    auth: AuthenticatedOrg,
) -> ResourceColumns:
    """Replace every editable field of an owned resource."""
    row = await get_resource_or_404(session, resource_type, resource_id)
    if row.organization_id != auth.org_id:
        raise HTTPException(status_code=403, detail="You can only edit your own resources")

    for field, value in payload.model_dump(mode="python").items():
        setattr(row, field, value)
    session.add(row)
    await session.flush()
    await session.refresh(row)

    log.info("resource.updated", resource_type=resource_type.value, resource_id=str(row.id))
    return row


# ---------------------------------------------------------------------------
# Donation search
# ---------------------------------------------------------------------------


async def search_donations(
    session: AsyncSession,
    viewer_id: uuid.UUID,
    filters: DonationFilters,
    today: Optional[date] = None,
    window_days: int = 90,
) -> DonationBoard:
    """Run the donation board filter over the current store contents."""
    organizations = [
        OrganizationRead.model_validate(org) for org in await list_organizations(session)
    ]
    per_type = [
        [to_read(resource_type, row) for row in await list_resources(session, resource_type)]
        for resource_type in ResourceType
    ]
    return build_donation_board(
        viewer_id,
        organizations,
        itertools.chain.from_iterable(per_type),
        filters,
        today=today,
        window_days=window_days,
    )
