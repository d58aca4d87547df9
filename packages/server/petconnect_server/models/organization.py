"""Organization model."""

import uuid

from sqlmodel import Field, SQLModel

from petconnect_shared.schemas.common import OrganizationStatus

from .base import CreatedAtMixin, UUIDMixin


class Organization(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False, index=True)
    cnpj: str = Field(nullable=False)
    city: str = Field(nullable=False)
    state: str = Field(nullable=False, index=True)
    contact_email: str = Field(unique=True, nullable=False, index=True)
    contact_phone: str = Field(nullable=False)
    status: str = Field(default=OrganizationStatus.PENDING.value, nullable=False)
    owner_user_id: uuid.UUID = Field(foreign_key="users.id", unique=True, nullable=False)
