"""tasks and resources

Revision ID: c41d9e7a2f35
Revises: a7c3e1f20b64
Create Date: 2026-10-19 15:30:00.000000

This migration creates:
1. tasks - work handed out by admins
2. task_assignments - one row per targeted student or batch
3. task_progress - per-student status on an assignment
4. resources - files published to a batch, a program or everyone
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "c41d9e7a2f35"
down_revision: str | Sequence[str] | None = "a7c3e1f20b64"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create task and resource tables."""
    bind = op.get_bind()

    assignment_type_enum = postgresql.ENUM(
        "INDIVIDUAL", "BATCH", "PROGRAM", name="task_assignment_type", create_type=False
    )
    assignment_type_enum.create(bind, checkfirst=True)

    task_status_enum = postgresql.ENUM(
        "PENDING", "IN_PROGRESS", "COMPLETED", "OVERDUE", name="task_status", create_type=False
    )
    task_status_enum.create(bind, checkfirst=True)

    visibility_enum = postgresql.ENUM(
        "BATCH", "PROGRAM", "ALL", name="resource_visibility", create_type=False
    )
    visibility_enum.create(bind, checkfirst=True)

    # Created by the initial schema
    program_enum = postgresql.ENUM(name="program", create_type=False)

    op.create_table(
        "tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assignment_type", assignment_type_enum, nullable=False),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
    )

    op.create_table(
        "task_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("task_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_task_assignments_task_id", "task_assignments", ["task_id"])
    op.create_index("ix_task_assignments_student_id", "task_assignments", ["student_id"])
    op.create_index("ix_task_assignments_batch_id", "task_assignments", ["batch_id"])

    op.create_table(
        "task_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("assignment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", task_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["assignment_id"], ["task_assignments.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "assignment_id", "student_id", name="uq_task_progress_assignment_student"
        ),
    )
    op.create_index("ix_task_progress_student_id", "task_progress", ["student_id"])

    op.create_table(
        "resources",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("stored_path", sa.String(length=500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=150), nullable=False),
        sa.Column("visibility_type", visibility_enum, nullable=False),
        sa.Column("program", program_enum, nullable=True),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("uploaded_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["uploaded_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_resources_batch_id", "resources", ["batch_id"])


def downgrade() -> None:
    """Drop task and resource tables."""
    bind = op.get_bind()

    op.drop_index("ix_resources_batch_id", table_name="resources")
    op.drop_table("resources")

    op.drop_index("ix_task_progress_student_id", table_name="task_progress")
    op.drop_table("task_progress")

    op.drop_index("ix_task_assignments_batch_id", table_name="task_assignments")
    op.drop_index("ix_task_assignments_student_id", table_name="task_assignments")
    op.drop_index("ix_task_assignments_task_id", table_name="task_assignments")
    op.drop_table("task_assignments")

    op.drop_table("tasks")

    postgresql.ENUM(name="resource_visibility").drop(bind, checkfirst=True)
    postgresql.ENUM(name="task_status").drop(bind, checkfirst=True)
    postgresql.ENUM(name="task_assignment_type").drop(bind, checkfirst=True)
