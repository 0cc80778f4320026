"""
Fixtures for tasks tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from erp.modules.batches.models import Batch, Program
from erp.modules.students.models import Student
from erp.modules.tasks.models import Task, TaskAssignment, TaskAssignmentType


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def sample_batch():
    batch = MagicMock(spec=Batch)
    batch.id = uuid4()
    batch.name = "BS-2025"
    batch.program = Program.BS
    batch.intake_year = 2025
    batch.is_active = True
    return batch


@pytest.fixture
def sample_student(sample_batch):
    student = MagicMock(spec=Student)
    student.id = uuid4()
    student.user_id = uuid4()
    student.full_name = "Aisha Khan"
    student.program = Program.BS
    student.batch_id = sample_batch.id
    return student


@pytest.fixture
def make_task():
    """Build a task with one assignment per given batch."""

    def _make(assignment_type=TaskAssignmentType.BATCH, batches=(), student=None):
        task = MagicMock(spec=Task)
        task.id = uuid4()
        task.title = "Submit transcripts"
        task.description = "Upload attested copies"
        task.due_date = None
        task.assignment_type = assignment_type
        task.created_by_id = uuid4()
        task.created_at = datetime.now(UTC)

        assignments = []
        for batch in batches:
            assignment = MagicMock(spec=TaskAssignment)
            assignment.id = uuid4()
            assignment.task = task
            assignment.student_id = None
            assignment.student = None
            assignment.batch_id = batch.id
            assignment.batch = batch
            assignments.append(assignment)
        if student is not None:
            assignment = MagicMock(spec=TaskAssignment)
            assignment.id = uuid4()
            assignment.task = task
            assignment.student_id = student.id
            assignment.student = student
            assignment.batch_id = None
            assignment.batch = None
            assignments.append(assignment)
        task.assignments = assignments
        return task

    return _make
