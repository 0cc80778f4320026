"""
Tasks Repository

Database operations for tasks, their assignments and per-student progress.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.modules.students.models import Student
from erp.modules.tasks.models import (
    Task,
    TaskAssignment,
    TaskAssignmentType,
    TaskProgress,
    TaskStatus,
)


async def create_task(
    db: AsyncSession,
    *,
    title: str,
    description: str,
    due_date: datetime | None,
    assignment_type: TaskAssignmentType,
    created_by_id: UUID,
    student_id: UUID | None = None,
    batch_ids: list[UUID] | None = None,
) -> Task:
    """
    Create a task and its assignments in one transaction.

    Args:
        student_id: Target of an INDIVIDUAL task
        batch_ids: Targets of a BATCH or PROGRAM task
    """
    task = Task(
        title=title,
        description=description,
        due_date=due_date,
        assignment_type=assignment_type,
        created_by_id=created_by_id,
    )
    if student_id is not None:
        task.assignments.append(TaskAssignment(student_id=student_id))
    for batch_id in batch_ids or []:
        task.assignments.append(TaskAssignment(batch_id=batch_id))

    db.add(task)
    await db.commit()

    # Reload so each assignment carries its student and batch
    result = await db.execute(
        select(Task)
        .where(Task.id == task.id)
        .options(
            selectinload(Task.assignments).selectinload(TaskAssignment.student),
            selectinload(Task.assignments).selectinload(TaskAssignment.batch),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_tasks(db: AsyncSession) -> list[Task]:
    """All tasks, newest first."""
    result = await db.execute(select(Task).order_by(desc(Task.created_at)))
    return list(result.scalars().all())


def _reaches_student(student: Student):
    if student.batch_id is None:
        return TaskAssignment.student_id == student.id
    return or_(
        TaskAssignment.student_id == student.id,
        TaskAssignment.batch_id == student.batch_id,
    )


async def list_for_student(
    db: AsyncSession, student: Student
) -> list[tuple[TaskAssignment, TaskProgress | None]]:
    """
    Assignments reaching a student (directly or through their batch),
    each with the student's progress row if one exists.

    Ordered by due date (undated last), then newest task first.
    """
    result = await db.execute(
        select(TaskAssignment, TaskProgress)
        .join(Task, Task.id == TaskAssignment.task_id)
        .outerjoin(
            TaskProgress,
            and_(
                TaskProgress.assignment_id == TaskAssignment.id,
                TaskProgress.student_id == student.id,
            ),
        )
        .where(_reaches_student(student))
        .order_by(Task.due_date.asc().nulls_last(), desc(Task.created_at))
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_assignment_for_student(
    db: AsyncSession, assignment_id: UUID, student: Student
) -> TaskAssignment | None:
    """Get an assignment only if it reaches the student."""
    result = await db.execute(
        select(TaskAssignment).where(
            TaskAssignment.id == assignment_id,
            _reaches_student(student),
        )
    )
    return result.scalar_one_or_none()


async def upsert_progress(
    db: AsyncSession,
    *,
    assignment_id: UUID,
    student_id: UUID,
    status: TaskStatus,
    completed_at: datetime | None,
) -> None:
    """Insert or overwrite a student's status on an assignment."""
    stmt = pg_insert(TaskProgress).values(
        assignment_id=assignment_id,
        student_id=student_id,
        status=status,
        completed_at=completed_at,
    )
    stmt = stmt.on_conflict_do_update(
        constraint="uq_task_progress_assignment_student",
        set_={
            "status": stmt.excluded.status,
            "completed_at": stmt.excluded.completed_at,
            "updated_at": func.now(),
        },
    )
    await db.execute(stmt)
    await db.commit()
