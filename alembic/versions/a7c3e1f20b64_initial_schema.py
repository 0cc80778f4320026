"""initial schema

Revision ID: a7c3e1f20b64
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates:
1. users - accounts with role (admin/student)
2. batches - one per (program, intake_year), enforced by a unique constraint
3. form_visibility - per-batch section visibility (one row per batch)
4. students - one profile per user, optionally assigned to a batch
5. student_documents - uploaded document metadata
6. audit_logs - record of state-changing actions
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a7c3e1f20b64"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

VISIBILITY_SECTIONS = (
    "personal_details",
    "education",
    "travel",
    "work_details",
    "financials",
    "documents",
    "course_details",
    "university",
    "post_admission",
)


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
    """Create all tables."""
    bind = op.get_bind()

    user_role_enum = postgresql.ENUM("admin", "student", name="user_role", create_type=False)
    user_role_enum.create(bind, checkfirst=True)

    # Shared by batches and students
    program_enum = postgresql.ENUM("BS", "BBA", name="program", create_type=False)
    program_enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", user_role_enum, nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "batches",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("program", program_enum, nullable=False),
        sa.Column("intake_year", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("program", "intake_year", name="uq_batches_program_intake_year"),
    )
    op.create_index("ix_batches_program", "batches", ["program"])

    op.create_table(
        "form_visibility",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=False),
        *[
            sa.Column(section, sa.Boolean(), nullable=False, server_default="true")
            for section in VISIBILITY_SECTIONS
        ],
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("batch_id", name="uq_form_visibility_batch_id"),
    )

    op.create_table(
        "students",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("batch_id", postgresql.UUID(as_uuid=True), nullable=True),
        # Course details
        sa.Column("program", program_enum, nullable=False),
        sa.Column("intake_year", sa.Integer(), nullable=False),
        sa.Column(
            "has_completed_onboarding", sa.Boolean(), nullable=False, server_default="false"
        ),
        # Personal details
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("country_of_birth", sa.String(length=100), nullable=True),
        sa.Column("native_language", sa.String(length=100), nullable=True),
        sa.Column("passport_number", sa.String(length=50), nullable=True),
        sa.Column("name_as_per_passport", sa.String(length=200), nullable=True),
        sa.Column("passport_issue_location", sa.String(length=100), nullable=True),
        sa.Column("passport_issue_date", sa.Date(), nullable=True),
        sa.Column("passport_expiry_date", sa.Date(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        # Education
        sa.Column("school", sa.String(length=200), nullable=True),
        sa.Column("school_grade", sa.String(length=20), nullable=True),
        sa.Column("high_school", sa.String(length=200), nullable=True),
        sa.Column("high_school_grade", sa.String(length=20), nullable=True),
        sa.Column("gre_taken", sa.Boolean(), nullable=True),
        sa.Column("toefl_taken", sa.Boolean(), nullable=True),
        # Travel
        sa.Column("travel_history", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("visa_refused", sa.Boolean(), nullable=True),
        # Work
        sa.Column("has_work_experience", sa.Boolean(), nullable=True),
        sa.Column("work_experiences", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        # Financials
        sa.Column("personal_ever_employed", sa.String(length=50), nullable=True),
        sa.Column("mother_income_type", sa.String(length=50), nullable=True),
        sa.Column("father_income_type", sa.String(length=50), nullable=True),
        # Documents
        sa.Column("passport_photo", sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("user_id", name="uq_students_user_id"),
    )
    op.create_index("ix_students_batch_id", "students", ["batch_id"])
    op.create_index("ix_students_program_intake_year", "students", ["program", "intake_year"])

    op.create_table(
        "student_documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("stored_path", sa.String(length=500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_student_documents_student_id", "student_documents", ["student_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("details", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_user_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_student_documents_student_id", table_name="student_documents")
    op.drop_table("student_documents")

    op.drop_index("ix_students_program_intake_year", table_name="students")
    op.drop_index("ix_students_batch_id", table_name="students")
    op.drop_table("students")

    op.drop_table("form_visibility")

    op.drop_index("ix_batches_program", table_name="batches")
    op.drop_table("batches")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    postgresql.ENUM(name="program").drop(bind, checkfirst=True)
    postgresql.ENUM(name="user_role").drop(bind, checkfirst=True)
