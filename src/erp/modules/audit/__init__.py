"""
Audit module - Records admin and student actions.

Audit writes never fail the request that triggered them.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.audit.models import AuditLog

logger = logging.getLogger(__name__)


async def record_audit(
    db: AsyncSession,
    *,
    user_id: UUID,
    action: str,
    entity: str,
    entity_id: UUID | str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> None:
    """
    Write an audit log entry.

    Failures are logged and swallowed (non-blocking).

    Args:
        db: Database session
        user_id: Acting user
        action: Action name (e.g. "ASSIGN_BATCH")
        entity: Entity type (e.g. "Student")
        entity_id: ID of the affected entity
        details: JSON-serializable context
        ip_address: Client IP address
    """
    try:
        db.add(
            AuditLog(
                user_id=user_id,
                action=action,
                entity=entity,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=details,
                ip_address=ip_address,
            )
        )
        await db.commit()
    except Exception as e:
        logger.error(f"Failed to create audit log for {action} on {entity} {entity_id}: {e}")
        await db.rollback()


__all__ = ["AuditLog", "record_audit"]
