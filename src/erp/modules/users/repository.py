"""
User Repository

Account lookups and creation. Emails are compared and stored lowercase.
"""

import logging

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Static helpers for the users table."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.STUDENT,
    ) -> User:
        """
        Insert an account and commit.

        Raises:
            IntegrityError: If the email is taken (callers map it to 409)
        """
        account = User(
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
            is_active=True,
        )
        db.add(account)
        await db.commit()
        await db.refresh(account)

        logger.info(f"Registered {account.role.value} account {account.id}")
        return account

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    @staticmethod
    async def email_exists(db: AsyncSession, email: str) -> bool:
        """Whether an account already uses this email."""
        query = select(exists().where(User.email == normalize_email(email)))
        return bool((await db.execute(query)).scalar())
