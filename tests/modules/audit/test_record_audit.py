"""
Unit tests for audit logging.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from erp.modules.audit import AuditLog, record_audit


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.mark.asyncio
async def test_writes_entry(mock_db):
    user_id = uuid4()
    student_id = uuid4()

    await record_audit(
        mock_db,
        user_id=user_id,
        action="ASSIGN_BATCH",
        entity="Student",
        entity_id=student_id,
        details={"old_batch_id": None},
        ip_address="10.0.0.1",
    )

    entry = mock_db.add.call_args.args[0]
    assert isinstance(entry, AuditLog)
    assert entry.action == "ASSIGN_BATCH"
    assert entry.entity_id == str(student_id)
    assert entry.details == {"old_batch_id": None}
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_commit_failure_is_swallowed(mock_db):
    mock_db.commit.side_effect = RuntimeError("connection lost")

    await record_audit(mock_db, user_id=uuid4(), action="LOGIN", entity="User")

    mock_db.rollback.assert_awaited_once()
