"""
Fixtures for resources tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from erp.modules.batches.models import Program
from erp.modules.resources.models import Resource, ResourceVisibility
from erp.modules.students.models import Student


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_storage():
    """Create a mock upload storage."""
    storage = AsyncMock()
    storage.save = AsyncMock(
        return_value=MagicMock(
            stored_path="/uploads/resources/slides.pdf",
            file_name="slides.pdf",
            file_size=2048,
        )
    )
    storage.read = AsyncMock(return_value=b"%PDF-1.4 slides")
    storage.delete = AsyncMock()
    return storage


@pytest.fixture
def sample_student():
    student = MagicMock(spec=Student)
    student.id = uuid4()
    student.user_id = uuid4()
    student.program = Program.BS
    student.batch_id = uuid4()
    return student


@pytest.fixture
def make_resource():
    """Build a resource addressed to the given audience."""

    def _make(visibility=ResourceVisibility.ALL, program=None, batch_id=None):
        resource = MagicMock(spec=Resource)
        resource.id = uuid4()
        resource.title = "Visa checklist"
        resource.description = None
        resource.file_name = "slides.pdf"
        resource.stored_path = "/uploads/resources/slides.pdf"
        resource.file_size = 2048
        resource.mime_type = "application/pdf"
        resource.visibility_type = visibility
        resource.program = program
        resource.batch_id = batch_id
        resource.batch = None
        resource.created_at = datetime.now(UTC)
        return resource

    return _make
