"""
Student Models

Database models for student profiles and their uploaded documents.
"""

import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base
from erp.modules.batches.models import Program
from erp.modules.shared import BaseModel

if TYPE_CHECKING:
    from erp.modules.batches.models import Batch
    from erp.modules.users.models import User


class DocumentType(str, enum.Enum):
    """Catalog of document types a student can upload."""

    # General documents
    PASSPORT = "PASSPORT"
    OLD_PASSPORT = "OLD_PASSPORT"
    VISA = "VISA"
    I20 = "I20"
    IELTS = "IELTS"
    TRANSCRIPT = "TRANSCRIPT"
    AADHAR_CARD = "AADHAR_CARD"
    DRIVERS_LICENSE = "DRIVERS_LICENSE"
    AFFIDAVIT = "AFFIDAVIT"
    CV_RESUME = "CV_RESUME"
    SOP = "SOP"
    OTHER = "OTHER"

    # Education documents
    MARKSHEET_10TH = "MARKSHEET_10TH"
    MARKSHEET_12TH = "MARKSHEET_12TH"
    GRE_SCORECARD = "GRE_SCORECARD"
    TOEFL_SCORECARD = "TOEFL_SCORECARD"
    LANGUAGE_TEST_SCORECARD = "LANGUAGE_TEST_SCORECARD"

    # Financial documents - personal
    PERSONAL_PAN_CARD = "PERSONAL_PAN_CARD"
    PERSONAL_ITR = "PERSONAL_ITR"
    PERSONAL_SALARY_SLIPS = "PERSONAL_SALARY_SLIPS"
    PERSONAL_SALARY_ACCOUNT_STATEMENT = "PERSONAL_SALARY_ACCOUNT_STATEMENT"
    PERSONAL_SAVING_ACCOUNT_STATEMENT = "PERSONAL_SAVING_ACCOUNT_STATEMENT"
    PERSONAL_FD_RECEIPTS = "PERSONAL_FD_RECEIPTS"
    PERSONAL_LOAN_SANCTION_LETTER = "PERSONAL_LOAN_SANCTION_LETTER"

    # Financial documents - mother
    MOTHER_PAN_CARD = "MOTHER_PAN_CARD"
    MOTHER_ITR = "MOTHER_ITR"
    MOTHER_SALARY_SLIPS = "MOTHER_SALARY_SLIPS"
    MOTHER_SAVING_ACCOUNT_STATEMENT = "MOTHER_SAVING_ACCOUNT_STATEMENT"
    MOTHER_BUSINESS_REGISTRATION = "MOTHER_BUSINESS_REGISTRATION"
    MOTHER_INCOME_PROOF = "MOTHER_INCOME_PROOF"

    # Financial documents - father
    FATHER_PAN_CARD = "FATHER_PAN_CARD"
    FATHER_ITR = "FATHER_ITR"
    FATHER_SALARY_SLIPS = "FATHER_SALARY_SLIPS"
    FATHER_SAVING_ACCOUNT_STATEMENT = "FATHER_SAVING_ACCOUNT_STATEMENT"
    FATHER_BUSINESS_REGISTRATION = "FATHER_BUSINESS_REGISTRATION"
    FATHER_INCOME_PROOF = "FATHER_INCOME_PROOF"

    # Financial documents - other income source
    OTHER_SOURCE_PAN_CARD = "OTHER_SOURCE_PAN_CARD"
    OTHER_SOURCE_ITR = "OTHER_SOURCE_ITR"
    OTHER_SOURCE_SALARY_SLIPS = "OTHER_SOURCE_SALARY_SLIPS"
    OTHER_SOURCE_SAVING_ACCOUNT_STATEMENT = "OTHER_SOURCE_SAVING_ACCOUNT_STATEMENT"
    OTHER_SOURCE_BUSINESS_REGISTRATION = "OTHER_SOURCE_BUSINESS_REGISTRATION"


class Student(BaseModel):
    """
    Student profile.

    Created at onboarding, one per user. Fields are grouped by profile
    section; most are optional and filled in over time.
    """

    __tablename__ = "students"
    __table_args__ = (Index("ix_students_program_intake_year", "program", "intake_year"),)

    # ON DELETE CASCADE: a profile cannot outlive its account
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    # ON DELETE SET NULL: removing a batch leaves its students unassigned
    batch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Course details (set at onboarding)
    program: Mapped[Program] = mapped_column(Enum(Program, name="program"), nullable=False)
    intake_year: Mapped[int] = mapped_column(Integer, nullable=False)
    has_completed_onboarding: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Personal details
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country_of_birth: Mapped[str | None] = mapped_column(String(100), nullable=True)
    native_language: Mapped[str | None] = mapped_column(String(100), nullable=True)
    passport_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    name_as_per_passport: Mapped[str | None] = mapped_column(String(200), nullable=True)
    passport_issue_location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    passport_issue_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    passport_expiry_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Education
    school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    school_grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    high_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    high_school_grade: Mapped[str | None] = mapped_column(String(20), nullable=True)
    gre_taken: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    toefl_taken: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Travel (JSON array of {country, from_date, to_date, purpose} objects)
    travel_history: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    visa_refused: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Work (JSON array of {company, role, start_date, end_date} objects)
    has_work_experience: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    work_experiences: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # Financials
    personal_ever_employed: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mother_income_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    father_income_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Documents (stored path of the passport photo)
    passport_photo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", lazy="selectin")
    batch: Mapped["Batch | None"] = relationship(
        "Batch",
        back_populates="students",
        lazy="selectin",
    )
    documents: Mapped[list["StudentDocument"]] = relationship(
        "StudentDocument",
        back_populates="student",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="StudentDocument.uploaded_at",
    )

    @property
    def full_name(self) -> str:
        """Return student's full name."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.full_name}, batch_id={self.batch_id})>"


class StudentDocument(Base):
    """
    Metadata of an uploaded document. The file itself lives in upload storage.
    """

    __tablename__ = "student_documents"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Stored as a string so classification also works for types retired from the catalog
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    stored_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    student: Mapped["Student"] = relationship("Student", back_populates="documents")

    def __repr__(self) -> str:
        return f"<StudentDocument(id={self.id}, type={self.type})>"
