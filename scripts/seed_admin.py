"""
Seed Admin User

Creates an admin account for the Student ERP. Credentials come from the
ADMIN_EMAIL and ADMIN_PASSWORD environment variables (or .env).

Usage:
    pip install -e .
    ADMIN_EMAIL=admin@example.com ADMIN_PASSWORD=... python scripts/seed_admin.py
"""

import asyncio
import logging
import os

from erp.core.config import settings
from erp.core.database import Database
from erp.core.logging_config import configure_logging
from erp.core.security import hash_password
from erp.modules.batches.models import Batch  # noqa: F401 - needed for relationship resolution
from erp.modules.students.models import Student  # noqa: F401
from erp.modules.users.models import UserRole
from erp.modules.users.repository import UserRepository

logger = logging.getLogger("seed_admin")


async def seed_admin(email: str, password: str) -> None:
    """Create the admin user if it doesn't exist."""
    database = Database(settings.async_database_url, pooled=False)

    try:
        async with database.session_maker() as db:
            existing_user = await UserRepository.get_by_email(db, email)
            if existing_user:
                logger.info(
                    f"User already exists: {existing_user.email} "
                    f"(id={existing_user.id}, role={existing_user.role.value})"
                )
                return

            admin_user = await UserRepository.create(
                db,
                email=email,
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
            )
            logger.info(f"Admin created: {admin_user.email} (id={admin_user.id})")
    finally:
        await database.close()


def main() -> None:
    configure_logging(settings.log_level)

    email = os.environ.get("ADMIN_EMAIL")
    password = os.environ.get("ADMIN_PASSWORD")
    if not email or not password:
        raise SystemExit("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
    if len(password) < 8:
        raise SystemExit("ADMIN_PASSWORD must be at least 8 characters")

    asyncio.run(seed_admin(email, password))


if __name__ == "__main__":
    main()
