"""Resource request schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from .common import RequestStatus, ResourceType


class ResourceRequestCreate(BaseModel):
    resource_id: uuid.UUID
    resource_type: ResourceType
    donating_organization_id: uuid.UUID
    requesting_organization_id: uuid.UUID


class ResourceRequestRead(BaseModel):
    id: uuid.UUID
    created_at: datetime
    resource_id: uuid.UUID
    resource_type: ResourceType
    donating_organization_id: uuid.UUID
    requesting_organization_id: uuid.UUID
    status: RequestStatus

    model_config = {"from_attributes": True}


class RequestTransition(BaseModel):
    """Request body for POST /requests/{requestId}/transition."""
    to_status: RequestStatus
