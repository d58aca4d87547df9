#!/usr/bin/env python3
"""Seed a development database with the demo NGOs, resources and one request.

Usage:
    python scripts/seed_dev_data.py

Uses PC_DATABASE_URL (or the configured default). Every demo account logs in
with password ``password123``. Safe to run twice: existing rows are kept.
"""

import asyncio
import uuid
from datetime import date

from petconnect_server.core.auth import hash_password
from petconnect_server.core.database import get_session_context, init_db
from petconnect_server.models.organization import Organization
from petconnect_server.models.resource_request import ResourceRequest
from petconnect_server.models.resources import Article, Medicine, Ration
from petconnect_server.models.user import User

DEMO_PASSWORD = "password123"

# Deterministic UUIDs for reproducibility
ORG_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000000{i:02d}") for i in range(1, 4)]
USER_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000001{i:02d}") for i in range(1, 4)]
MEDICINE_ID = uuid.UUID("00000000-0000-0000-0000-000000000201")
RATION_ID = uuid.UUID("00000000-0000-0000-0000-000000000301")
ARTICLE_ID = uuid.UUID("00000000-0000-0000-0000-000000000401")
REQUEST_ID = uuid.UUID("00000000-0000-0000-0000-000000000501")

ORGANIZATIONS = [
    ("Cão Sem Fome", "11.111.111/0001-11", "São Paulo", "SP", "caosemfome@test.com", "11999999999", "verified"),
    ("Patas Unidas", "22.222.222/0001-22", "Rio de Janeiro", "RJ", "patasunidas@test.com", "21999999999", "verified"),
    ("Focinhos Carentes", "33.333.333/0001-33", "Belo Horizonte", "MG", "focinhos@test.com", "31999999999", "pending"),
]


async def seed():
    await init_db()

    async with get_session_context() as session:
        if await session.get(Organization, ORG_IDS[0]):
            print("Demo data already present.")
            return

        password_hash = hash_password(DEMO_PASSWORD)
        for org_id, user_id, (name, cnpj, city, state, email, phone, status) in zip(
            ORG_IDS, USER_IDS, ORGANIZATIONS
        ):
            session.add(User(id=user_id, email=email, password_hash=password_hash))
            await session.flush()
            session.add(
                Organization(
                    id=org_id,
                    name=name,
                    cnpj=cnpj,
                    city=city,
                    state=state,
                    contact_email=email,
                    contact_phone=phone,
                    status=status,
                    owner_user_id=user_id,
                )
            )
        await session.flush()

        cao_sem_fome, patas_unidas, _ = ORG_IDS
        session.add(
            Medicine(
                id=MEDICINE_ID,
                organization_id=patas_unidas,
                name="Vermífugo Drontal",
                active_ingredient="Praziquantel",
                quantity="2 caixas",
                expiration_date=date(2025, 12, 31),
            )
        )
        session.add(
            Ration(
                id=RATION_ID,
                organization_id=patas_unidas,
                brand="Golden Power Training",
                quantity_kg=15,
                expiration_date=date(2025, 8, 1),
            )
        )
        session.add(
            Article(
                id=ARTICLE_ID,
                organization_id=cao_sem_fome,
                name="Coleira Anti-pulgas",
                category="accessories",
                quantity=5,
                condition="new",
                size_specification="Tamanho M",
            )
        )
        await session.flush()

        session.add(
            ResourceRequest(
                id=REQUEST_ID,
                resource_id=ARTICLE_ID,
                resource_type="articles",
                donating_organization_id=cao_sem_fome,
                requesting_organization_id=patas_unidas,
            )
        )

    print(f"Seeded {len(ORGANIZATIONS)} organizations (password: {DEMO_PASSWORD}).")


if __name__ == "__main__":
    asyncio.run(seed())
