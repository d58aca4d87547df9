"""
Resource schemas: the Medicine / Ration / Article tagged union.

Every variant carries ``resource_type`` (the collection name) as its
discriminator. Resource ids are only unique within a collection, so any
lookup must pass the tag alongside the id.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .common import ArticleCategory, ArticleCondition, ResourceStatus, ResourceType


# ---------------------------------------------------------------------------
# Create / update payloads (editable fields only)
# ---------------------------------------------------------------------------

class MedicineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    active_ingredient: str = Field(..., min_length=1, max_length=200)
    quantity: str = Field(..., min_length=1, max_length=100, description="Free text, e.g. '2 boxes'")
    expiration_date: date
    notes: Optional[str] = None
    photo_base64: Optional[str] = None


class RationCreate(BaseModel):
    brand: str = Field(..., min_length=1, max_length=200)
    quantity_kg: float = Field(..., gt=0)
    expiration_date: date
    notes: Optional[str] = None
    photo_base64: Optional[str] = None


class ArticleCreate(BaseModel):
    model_config = {"use_enum_values": True}

    name: str = Field(..., min_length=1, max_length=200)
    category: ArticleCategory
    quantity: int = Field(..., ge=1)
    condition: ArticleCondition
    size_specification: Optional[str] = None
    notes: Optional[str] = None
    photo_base64: Optional[str] = None


ResourceCreate = Union[MedicineCreate, RationCreate, ArticleCreate]

CREATE_SCHEMAS: dict[ResourceType, type[BaseModel]] = {
    ResourceType.MEDICINES: MedicineCreate,
    ResourceType.RATIONS: RationCreate,
    ResourceType.ARTICLES: ArticleCreate,
}


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

class _StoredFields(BaseModel):
    """Columns every stored resource has, whatever its variant."""

    id: uuid.UUID
    created_at: datetime
    organization_id: uuid.UUID
    status: ResourceStatus
    photo_base64: Optional[str] = None

    model_config = {"from_attributes": True}


class MedicineRead(_StoredFields):
    resource_type: Literal["medicines"] = "medicines"
    name: str
    active_ingredient: str
    quantity: str
    expiration_date: date
    notes: Optional[str] = None


class RationRead(_StoredFields):
    resource_type: Literal["rations"] = "rations"
    brand: str
    quantity_kg: float
    expiration_date: date
    notes: Optional[str] = None


class ArticleRead(_StoredFields):
    resource_type: Literal["articles"] = "articles"
    name: str
    category: ArticleCategory
    quantity: int
    condition: ArticleCondition
    size_specification: Optional[str] = None
    notes: Optional[str] = None


Resource = Annotated[
    Union[MedicineRead, RationRead, ArticleRead],
    Field(discriminator="resource_type"),
]

READ_SCHEMAS: dict[ResourceType, type[BaseModel]] = {
    ResourceType.MEDICINES: MedicineRead,
    ResourceType.RATIONS: RationRead,
    ResourceType.ARTICLES: ArticleRead,
}


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def display_name(resource: Resource) -> str:
    """Rations are identified by brand, the other variants by name."""
    if resource.resource_type == ResourceType.RATIONS:
        return resource.brand
    return resource.name


def expiration_of(resource: Resource) -> Optional[date]:
    if resource.resource_type == ResourceType.ARTICLES:
        return None
    return resource.expiration_date


def quantity_label(resource: Resource) -> str:
    if resource.resource_type == ResourceType.RATIONS:
        return f"{resource.quantity_kg:g} kg"
    return str(resource.quantity)
