"""
Database seeding utilities for minimal reference data.

Seeds:
- Product categories for the stationery and gift store modules
- An admin account (SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD)

Usage:
  python -m pointart_api.db.run_migrations upgrade head
  python -m pointart_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Tuple

from pointart_api.core.security import hash_password
from pointart_api.db.client import DataClient
from pointart_api.db.session import data_client_scope

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: List[Tuple[str, str]] = [
    ("Books", "stationery"),
    ("Pens", "stationery"),
    ("Paper", "stationery"),
    ("Art Supplies", "stationery"),
    ("Office Supplies", "stationery"),
    ("Cards", "gift_store"),
    ("Frames", "gift_store"),
    ("Toys", "gift_store"),
    ("Souvenirs", "gift_store"),
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed product categories and the admin account, skipping rows that exist."""
    async with data_client_scope() as client:
        await _seed_categories(client)
        await _seed_admin(client)


async def _seed_categories(client: DataClient) -> None:
    existing = await client.table("product_categories").select("name, module").execute()
    present = {(r["name"], r["module"]) for r in existing.data}
    missing = [
        {"name": name, "module": module}
        for name, module in DEFAULT_CATEGORIES
        if (name, module) not in present
    ]
    if missing:
        await client.table("product_categories").insert(missing).execute()
    logger.info("Seeded %d product categories", len(missing))


async def _seed_admin(client: DataClient) -> None:
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@pointarthub.com").lower()
    password = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123!")

    found = await client.table("users").select("id").eq("email", email).maybe_single().execute()
    if found.data:
        return

    created = await client.table("users").insert(
        {"email": email, "hashed_password": hash_password(password), "is_active": True}
    ).single().execute()
    await client.table("profiles").insert(
        {"user_id": created.data["id"], "full_name": "Administrator", "role": "admin"}
    ).execute()
    logger.info("Seeded admin account %s", email)


if __name__ == "__main__":
    asyncio.run(seed_all())
