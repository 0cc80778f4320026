"""
Tasks Service Layer

Business logic for admin-assigned tasks.

This module implements:
1. Task creation:
   - INDIVIDUAL tasks target one student, BATCH tasks one batch
   - PROGRAM tasks fan out to every active batch of the program
2. Student task lists:
   - Direct and batch assignments, each with the student's own status
3. Status updates:
   - Only on assignments that reach the student; COMPLETED stamps completed_at
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.batches import repository as batches_repository
from erp.modules.batches import service as batches_service
from erp.modules.shared import ServiceError
from erp.modules.students import repository as students_repository
from erp.modules.students.service import StudentNotFoundError
from erp.modules.tasks import repository
from erp.modules.tasks.models import (
    Task,
    TaskAssignment,
    TaskAssignmentType,
    TaskStatus,
)
from erp.modules.tasks.schemas import (
    StudentTaskListResponse,
    StudentTaskResponse,
    TaskAssignmentResponse,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
)

logger = logging.getLogger(__name__)


class TaskServiceError(ServiceError):
    """Base exception for task service errors."""


class InvalidTaskAssignmentError(TaskServiceError):
    """Raised when a task's target is missing or unusable."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_ASSIGNMENT",
            status_code=400,
        )


class TaskAssignmentNotFoundError(TaskServiceError):
    """Raised when an assignment does not exist or does not reach the student."""

    def __init__(self, assignment_id: UUID):
        super().__init__(
            message=f"Task assignment {assignment_id} not found",
            error_code="TASK_ASSIGNMENT_NOT_FOUND",
            status_code=404,
        )


def validate_assignment_target(data: TaskCreateRequest) -> None:
    """
    Check the target required by the assignment type is present.

    Raises:
        InvalidTaskAssignmentError: If the matching ID or program is missing
    """
    if data.assignment_type == TaskAssignmentType.INDIVIDUAL and data.student_id is None:
        raise InvalidTaskAssignmentError("student_id is required for individual assignment")
    if data.assignment_type == TaskAssignmentType.BATCH and data.batch_id is None:
        raise InvalidTaskAssignmentError("batch_id is required for batch assignment")
    if data.assignment_type == TaskAssignmentType.PROGRAM and data.program is None:
        raise InvalidTaskAssignmentError("program is required for program assignment")


def _assignment_response(assignment: TaskAssignment) -> TaskAssignmentResponse:
    return TaskAssignmentResponse(
        id=assignment.id,
        student_id=assignment.student_id,
        student_name=assignment.student.full_name if assignment.student else None,
        batch_id=assignment.batch_id,
        batch_name=assignment.batch.name if assignment.batch else None,
    )


def _task_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        assignment_type=task.assignment_type,
        created_by_id=task.created_by_id,
        created_at=task.created_at,
        assignments=[_assignment_response(a) for a in task.assignments],
    )


def _student_task_response(
    assignment: TaskAssignment, status: TaskStatus, completed_at: datetime | None
) -> StudentTaskResponse:
    task = assignment.task
    return StudentTaskResponse(
        assignment_id=assignment.id,
        task_id=task.id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        assignment_type=task.assignment_type,
        status=status,
        completed_at=completed_at,
    )


async def create_task(
    db: AsyncSession,
    *,
    admin_id: UUID,
    data: TaskCreateRequest,
) -> TaskResponse:
    """
    Create a task and assign it.

    Args:
        db: Database session
        admin_id: The creating admin
        data: Task details and target

    Returns:
        TaskResponse with its assignments

    Raises:
        InvalidTaskAssignmentError: If the target is missing, or a program has no active batches
        StudentNotFoundError: If the INDIVIDUAL target does not exist
        BatchNotFoundError: If the BATCH target does not exist
    """
    validate_assignment_target(data)

    student_id = None
    batch_ids: list[UUID] = []
    if data.assignment_type == TaskAssignmentType.INDIVIDUAL:
        student = await students_repository.get_by_id(db, data.student_id)
        if not student:
            raise StudentNotFoundError(f"Student {data.student_id} not found")
        student_id = student.id
    elif data.assignment_type == TaskAssignmentType.BATCH:
        batch = await batches_service.get_batch_or_404(db, data.batch_id)
        batch_ids = [batch.id]
    else:
        batch_ids = await batches_repository.list_active_ids_by_program(db, data.program)
        if not batch_ids:
            raise InvalidTaskAssignmentError(
                f"Program {data.program.value} has no active batches"
            )

    task = await repository.create_task(
        db,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        assignment_type=data.assignment_type,
        created_by_id=admin_id,
        student_id=student_id,
        batch_ids=batch_ids,
    )

    logger.info(
        f"Admin {admin_id} created task {task.id} "
        f"({data.assignment_type.value}, {len(task.assignments)} assignments)"
    )
    return _task_response(task)


async def list_tasks(db: AsyncSession) -> TaskListResponse:
    """Every task with its assignments."""
    tasks = await repository.list_tasks(db)
    return TaskListResponse(tasks=[_task_response(task) for task in tasks])


async def list_student_tasks(db: AsyncSession, user_id: UUID) -> StudentTaskListResponse:
    """Tasks reaching the current student. A user without a profile has none."""
    student = await students_repository.get_by_user_id(db, user_id)
    if not student:
        return StudentTaskListResponse(tasks=[])

    rows = await repository.list_for_student(db, student)
    return StudentTaskListResponse(
        tasks=[
            _student_task_response(
                assignment,
                progress.status if progress else TaskStatus.PENDING,
                progress.completed_at if progress else None,
            )
            for assignment, progress in rows
        ]
    )


async def update_task_status(
    db: AsyncSession,
    *,
    user_id: UUID,
    assignment_id: UUID,
    status: TaskStatus,
) -> StudentTaskResponse:
    """
    Set the current student's status on an assignment.

    Raises:
        StudentNotFoundError: If the user has not onboarded
        TaskAssignmentNotFoundError: If the assignment does not reach the student
    """
    student = await students_repository.get_by_user_id(db, user_id)
    if not student:
        raise StudentNotFoundError()

    assignment = await repository.get_assignment_for_student(db, assignment_id, student)
    if not assignment:
        raise TaskAssignmentNotFoundError(assignment_id)

    completed_at = datetime.now(UTC) if status == TaskStatus.COMPLETED else None
    await repository.upsert_progress(
        db,
        assignment_id=assignment.id,
        student_id=student.id,
        status=status,
        completed_at=completed_at,
    )

    logger.info(f"Student {student.id} set assignment {assignment.id} to {status.value}")
    return _student_task_response(assignment, status, completed_at)
