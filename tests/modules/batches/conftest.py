"""
Fixtures for batches tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from erp.modules.batches.models import Batch, FormVisibility, Program


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def sample_batch():
    """Create a sample BS 2025 batch."""
    batch = MagicMock(spec=Batch)
    batch.id = uuid4()
    batch.name = "BS-2025"
    batch.program = Program.BS
    batch.intake_year = 2025
    batch.description = None
    batch.is_active = True
    batch.form_visibility = None
    batch.created_at = datetime.now(UTC)
    return batch


@pytest.fixture
def sample_visibility(sample_batch):
    """Visibility row hiding the three placeholder sections."""
    visibility = MagicMock(spec=FormVisibility)
    visibility.batch_id = sample_batch.id
    visibility.personal_details = True
    visibility.education = True
    visibility.travel = True
    visibility.work_details = True
    visibility.financials = True
    visibility.documents = True
    visibility.course_details = False
    visibility.university = False
    visibility.post_admission = False
    return visibility
