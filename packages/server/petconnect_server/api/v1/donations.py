"""
Donation search: the donation board computed by the store.

Uses the same filter as the client's in-memory board.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from petconnect_server.core.auth import AuthenticatedOrg, get_authenticated_org
from petconnect_server.core.config import get_settings
from petconnect_server.core.database import get_session
from petconnect_server.services.resources import search_donations
from petconnect_shared.board import DonationBoard, DonationFilters

router = APIRouter()
settings = get_settings()


@router.get("", response_model=DonationBoard)
async def search_donations_endpoint(
    query: str = "",
    category: str = "",
    state: str = "",
    urgent_only: bool = False,
    auth: AuthenticatedOrg = Depends(get_authenticated_org),
    session: AsyncSession = Depends(get_session),
):
    """Available resources of other organizations matching the filters."""
    filters = DonationFilters(query=query, category=category, state=state, urgent_only=urgent_only)
    return await search_donations(
        session, auth.org_id, filters, window_days=settings.urgency_window_days
    )
