"""Resource request model."""

import uuid

from sqlmodel import Field, SQLModel

from petconnect_shared.schemas.common import RequestStatus

from .base import CreatedAtMixin, UUIDMixin


class ResourceRequest(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "resource_requests"

    # No FK on resource_id: it points into one of three tables, picked by resource_type
    resource_id: uuid.UUID = Field(nullable=False, index=True)
    resource_type: str = Field(nullable=False)
    donating_organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", index=True, nullable=False
    )
    requesting_organization_id: uuid.UUID = Field(
        foreign_key="organizations.id", index=True, nullable=False
    )
    status: str = Field(default=RequestStatus.PENDING.value, nullable=False, index=True)
