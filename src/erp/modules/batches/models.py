"""
Batch Models

A batch is the cohort of students sharing a program and intake year.
Each batch may carry one form visibility row deciding which profile
sections apply to its students.
"""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.modules.shared import BaseModel

if TYPE_CHECKING:
    from erp.modules.students.models import Student


class Program(str, enum.Enum):
    """Degree tracks offered."""

    BS = "BS"
    BBA = "BBA"


class Batch(BaseModel):
    """
    Student batch (program x intake year).

    Created lazily the first time a student with that pair onboards.
    The (program, intake_year) pair is unique; batch resolution relies on it.
    """

    __tablename__ = "batches"
    __table_args__ = (
        UniqueConstraint("program", "intake_year", name="uq_batches_program_intake_year"),
    )

    program: Mapped[Program] = mapped_column(
        Enum(Program, name="program"),
        nullable=False,
        index=True,
    )
    intake_year: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    form_visibility: Mapped["FormVisibility | None"] = relationship(
        "FormVisibility",
        back_populates="batch",
        uselist=False,
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    students: Mapped[list["Student"]] = relationship(
        "Student",
        back_populates="batch",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Batch(id={self.id}, name={self.name}, active={self.is_active})>"


class FormVisibility(BaseModel):
    """
    Per-batch section visibility.

    One row per batch. A batch without a row shows every section.
    """

    __tablename__ = "form_visibility"

    # ON DELETE CASCADE: visibility has no meaning without its batch
    batch_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    personal_details: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    education: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    travel: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    work_details: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    financials: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    documents: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    course_details: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    university: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    post_admission: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    batch: Mapped["Batch"] = relationship("Batch", back_populates="form_visibility")

    def __repr__(self) -> str:
        return f"<FormVisibility(batch_id={self.batch_id})>"
