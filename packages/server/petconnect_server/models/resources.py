"""
Resource tables: one per variant (medicines, rations, articles).

The three tables share their bookkeeping columns through ``ResourceColumns``;
callers always address a row by (resource_type, id).
"""

import uuid
from datetime import date
from typing import Optional

from sqlmodel import Field, SQLModel

from petconnect_shared.schemas.common import ResourceStatus, ResourceType

from .base import CreatedAtMixin, UUIDMixin


class ResourceColumns(UUIDMixin, CreatedAtMixin, SQLModel):
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", index=True, nullable=False)
    status: str = Field(default=ResourceStatus.AVAILABLE.value, nullable=False, index=True)
    photo_base64: Optional[str] = None
    notes: Optional[str] = None


class Medicine(ResourceColumns, table=True):
    __tablename__ = "medicines"

    name: str = Field(nullable=False)
    active_ingredient: str = Field(nullable=False)
    quantity: str = Field(nullable=False)
    expiration_date: date = Field(nullable=False)


class Ration(ResourceColumns, table=True):
    __tablename__ = "rations"

    brand: str = Field(nullable=False)
    quantity_kg: float = Field(nullable=False)
    expiration_date: date = Field(nullable=False)


class Article(ResourceColumns, table=True):
    __tablename__ = "articles"

    name: str = Field(nullable=False)
    category: str = Field(nullable=False)
    quantity: int = Field(nullable=False)
    condition: str = Field(nullable=False)
    size_specification: Optional[str] = None


RESOURCE_MODELS: dict[ResourceType, type[ResourceColumns]] = {
    ResourceType.MEDICINES: Medicine,
    ResourceType.RATIONS: Ration,
    ResourceType.ARTICLES: Article,
}
