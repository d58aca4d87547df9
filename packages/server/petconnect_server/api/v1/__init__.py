"""
API v1 Router

Every route below requires a session cookie; catalog mutations additionally
require a verified organization.
"""

from fastapi import APIRouter
from . import donations, organizations, requests, resources

router = APIRouter()

router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(resources.router, prefix="/resources", tags=["Resources"])
router.include_router(requests.router, prefix="/requests", tags=["Requests"])
router.include_router(donations.router, prefix="/donations", tags=["Donations"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/organizations",
            "/resources/{resource_type}",
            "/requests",
            "/donations",
        ],
    }
