"""
Task Schemas

Request/response models for admin task management and student task lists.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from erp.modules.batches.models import Program
from erp.modules.tasks.models import TaskAssignmentType, TaskStatus


class TaskCreateRequest(BaseModel):
    """
    Request body for POST /admin/tasks.

    student_id is required for INDIVIDUAL, batch_id for BATCH and
    program for PROGRAM.
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    due_date: datetime | None = None
    assignment_type: TaskAssignmentType
    student_id: UUID | None = None
    batch_id: UUID | None = None
    program: Program | None = None


class TaskAssignmentResponse(BaseModel):
    """Who a task was assigned to."""

    id: UUID
    student_id: UUID | None = None
    student_name: str | None = None
    batch_id: UUID | None = None
    batch_name: str | None = None


class TaskResponse(BaseModel):
    """A task with its assignments (admin view)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    due_date: datetime | None = None
    assignment_type: TaskAssignmentType
    created_by_id: UUID | None = None
    created_at: datetime
    assignments: list[TaskAssignmentResponse] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]


class StudentTaskResponse(BaseModel):
    """A task as seen by one student, with their own status."""

    assignment_id: UUID
    task_id: UUID
    title: str
    description: str
    due_date: datetime | None = None
    assignment_type: TaskAssignmentType
    status: TaskStatus
    completed_at: datetime | None = None


class StudentTaskListResponse(BaseModel):
    tasks: list[StudentTaskResponse]


class TaskStatusUpdateRequest(BaseModel):
    """Request body for PATCH /student/tasks/{assignment_id}."""

    status: TaskStatus
