"""
Create the first admin account.

Citizens can only ever register as citizens, so at least one admin has to be
put in place out of band. Run ``seed-admin`` (or ``python -m auth.seed``)
against the configured store, or set ``DEFAULT_ADMIN_PASSWORD`` and the API
seeds the account on startup.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from auth.config import AuthConfig
from auth.dependencies import get_user_store
from auth.exceptions import DuplicateContactNumberError
from auth.interfaces.user_store import UserStore
from auth.phone import is_valid_phone, normalize_phone
from auth.security import hash_password
from config import Config

logger = logging.getLogger(__name__)


async def seed_admin(
    user_store: UserStore,
    *,
    contact_number: str,
    password: str,
    first_name: str,
    last_name: str,
    barangay: str = "agnas",
) -> tuple[dict[str, Any], bool]:
    """Create a verified, active admin unless the number is already taken.

    Returns the stored user and whether it was created by this call. An
    existing account is left untouched, whatever its role.
    """
    if not is_valid_phone(contact_number):
        raise ValueError(f"Invalid admin contact number: {contact_number}")
    phone_key = normalize_phone(contact_number)

    existing = await user_store.get_by_contact_number(phone_key)
    if existing:
        if existing.get("role") != "admin":
            logger.warning(
                "Contact number %s belongs to a %s account; admin not seeded",
                phone_key,
                existing.get("role"),
            )
        else:
            logger.info("Admin %s already exists", phone_key)
        return existing, False

    hashed = await asyncio.to_thread(hash_password, password)
    try:
        user = await user_store.create_user(
            {
                "first_name": first_name,
                "last_name": last_name,
                "contact_number": phone_key,
                "hashed_password": hashed,
                "barangay": barangay,
                "role": "admin",
                "is_verified": True,
                "is_active": True,
            }
        )
    except DuplicateContactNumberError:
        # Lost a race with another seeder.
        return await user_store.get_by_contact_number(phone_key), False

    logger.info("Seeded admin %s (id=%s)", phone_key, user["id"])
    return user, True


async def seed_default_admin(user_store: UserStore) -> dict[str, Any] | None:
    """Seed the admin described by the DEFAULT_ADMIN_* settings, if configured."""
    if not AuthConfig.DEFAULT_ADMIN_PASSWORD:
        return None
    user, _ = await seed_admin(
        user_store,
        contact_number=AuthConfig.DEFAULT_ADMIN_CONTACT,
        password=AuthConfig.DEFAULT_ADMIN_PASSWORD,
        first_name=AuthConfig.DEFAULT_ADMIN_FIRSTNAME,
        last_name=AuthConfig.DEFAULT_ADMIN_LASTNAME,
        barangay=AuthConfig.DEFAULT_ADMIN_BARANGAY,
    )
    return user


def main() -> int:
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if not AuthConfig.DEFAULT_ADMIN_PASSWORD:
        logger.error("DEFAULT_ADMIN_PASSWORD is not set; nothing to seed")
        return 1
    if AuthConfig.AUTH_STORE != "postgres":
        logger.warning(
            "AUTH_STORE=%s; the seeded admin lives only in this process", AuthConfig.AUTH_STORE
        )

    asyncio.run(seed_default_admin(get_user_store()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
