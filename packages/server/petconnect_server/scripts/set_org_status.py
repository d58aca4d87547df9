"""
Script to verify or reject an NGO (the out-of-band verification step).

Usage:
    python -m petconnect_server.scripts.set_org_status --email ngo@example.org --status verified
"""

import argparse
import asyncio
import sys

from fastapi import HTTPException
from sqlmodel import select

from petconnect_server.core.database import get_session_context
from petconnect_server.models.organization import Organization
from petconnect_server.services.organizations import set_organization_status
from petconnect_shared.schemas.common import OrganizationStatus


async def update_status(email: str, status: OrganizationStatus) -> int:
    async with get_session_context() as session:
        result = await session.execute(
            select(Organization).where(Organization.contact_email == email.lower())
        )
        org = result.scalar_one_or_none()
        if not org:
            print(f"No organization registered with {email}.")
            return 1

        try:
            await set_organization_status(org, status, session)
        except HTTPException as exc:
            print(exc.detail)
            return 1

        print(f"{org.name} is now {status.value}.")
        return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Set an organization's verification status.")
    parser.add_argument("--email", required=True, help="Contact email the organization registered with")
    parser.add_argument(
        "--status",
        required=True,
        choices=[s.value for s in OrganizationStatus if s != OrganizationStatus.PENDING],
        help="New status",
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(update_status(args.email, OrganizationStatus(args.status))))
