"""
Task Models

A task is created by an admin and assigned to one student, one batch,
or every active batch of a program. Each student tracks their own
progress on every assignment that reaches them.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.modules.batches.models import Batch
from erp.modules.shared import BaseModel
from erp.modules.students.models import Student


class TaskAssignmentType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    BATCH = "BATCH"
    PROGRAM = "PROGRAM"


class TaskStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class Task(BaseModel):
    """A piece of work handed out by an admin."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    assignment_type: Mapped[TaskAssignmentType] = mapped_column(
        Enum(TaskAssignmentType, name="task_assignment_type"),
        nullable=False,
    )
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    assignments: Mapped[list["TaskAssignment"]] = relationship(
        "TaskAssignment",
        back_populates="task",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title}, type={self.assignment_type.value})>"


class TaskAssignment(BaseModel):
    """
    Target of a task: exactly one of student_id or batch_id is set.

    Program tasks get one assignment per active batch of the program at
    creation time.
    """

    __tablename__ = "task_assignments"

    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    batch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    task: Mapped["Task"] = relationship("Task", back_populates="assignments", lazy="selectin")
    student: Mapped[Student | None] = relationship(Student, lazy="selectin")
    batch: Mapped[Batch | None] = relationship(Batch, lazy="selectin")

    def __repr__(self) -> str:
        target = f"student={self.student_id}" if self.student_id else f"batch={self.batch_id}"
        return f"<TaskAssignment(id={self.id}, task_id={self.task_id}, {target})>"


class TaskProgress(BaseModel):
    """A student's status on an assignment. No row means PENDING."""

    __tablename__ = "task_progress"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_task_progress_assignment_student"),
    )

    assignment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("task_assignments.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status"),
        nullable=False,
        default=TaskStatus.PENDING,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<TaskProgress(assignment_id={self.assignment_id}, status={self.status.value})>"
