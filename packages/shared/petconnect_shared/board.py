"""
Donation board: which resources a viewer may browse and request.

The same function backs the client's in-memory board and the server-side
donation search, so both return the same items for the same filters.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .schemas.common import ResourceStatus, ResourceType
from .schemas.organizations import OrganizationRead
from .schemas.resources import Resource, display_name, expiration_of

URGENCY_WINDOW_DAYS = 90


class DonationFilters(BaseModel):
    query: str = ""
    # "", a resource type ("medicines", "rations") or an article category
    category: str = ""
    state: str = ""
    urgent_only: bool = False


class DonationItem(BaseModel):
    resource: Resource
    organization: OrganizationRead
    # Within the urgency window the board was built with
    urgent: bool = False


class DonationBoard(BaseModel):
    items: list[DonationItem] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)


def is_urgent(
    expiration_date: Optional[date],
    today: Optional[date] = None,
    window_days: int = URGENCY_WINDOW_DAYS,
) -> bool:
    """True when the item has not expired yet and expires within the window (inclusive)."""
    if expiration_date is None:
        return False
    today = today or date.today()
    remaining = (expiration_date - today).days
    return 0 <= remaining <= window_days


def matches_query(resource: Resource, query: str) -> bool:
    return query.lower() in display_name(resource).lower()


def matches_category(resource: Resource, category: str) -> bool:
    if not category:
        return True
    if resource.resource_type == category:
        return True
    return resource.resource_type == ResourceType.ARTICLES and resource.category == category


def build_donation_board(
    viewer_id: uuid.UUID,
    organizations: Iterable[OrganizationRead],
    resources: Iterable[Resource],
    filters: Optional[DonationFilters] = None,
    today: Optional[date] = None,
    window_days: int = URGENCY_WINDOW_DAYS,
) -> DonationBoard:
    """Eligible donations for ``viewer_id`` narrowed by ``filters``.

    Eligible means available, not owned by the viewer, and owned by an
    organization that can be resolved; unresolvable owners are dropped
    silently. ``states`` lists the distinct states of all eligible donations
    (before filtering), sorted.
    """
    filters = filters or DonationFilters()
    today = today or date.today()
    org_map = {org.id: org for org in organizations}

    eligible: list[DonationItem] = []
    states: set[str] = set()
    for resource in resources:
        if resource.status != ResourceStatus.AVAILABLE or resource.organization_id == viewer_id:
            continue
        organization = org_map.get(resource.organization_id)
        if organization is None:
            continue
        states.add(organization.state)
        eligible.append(
            DonationItem(
                resource=resource,
                organization=organization,
                urgent=is_urgent(expiration_of(resource), today, window_days),
            )
        )

    items = [
        item
        for item in eligible
        if matches_query(item.resource, filters.query)
        and matches_category(item.resource, filters.category)
        and (not filters.state or item.organization.state == filters.state)
        and (not filters.urgent_only or item.urgent)
    ]
    return DonationBoard(items=items, states=sorted(states))
