"""
Profile Snapshot

Read-only view of a student's profile, one tagged model per section.
Built from the persisted Student at the boundary and handed to the
completion evaluator.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field

from erp.modules.batches.models import Program
from erp.modules.students.models import Student


class PersonalDetails(BaseModel):
    """Personal details section."""

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | str | None = None
    gender: str | None = None
    nationality: str | None = None
    country_of_birth: str | None = None
    native_language: str | None = None
    passport_number: str | None = None
    name_as_per_passport: str | None = None
    passport_issue_location: str | None = None
    passport_issue_date: date | str | None = None
    passport_expiry_date: date | str | None = None
    address: str | None = None
    postal_code: str | None = None


class EducationDetails(BaseModel):
    """Education section."""

    school: str | None = None
    school_grade: str | None = None
    high_school: str | None = None
    high_school_grade: str | None = None
    gre_taken: bool | None = None
    toefl_taken: bool | None = None


class TravelDetails(BaseModel):
    """Travel section."""

    travel_history: list[Any] | None = None
    visa_refused: bool | None = None


class WorkDetails(BaseModel):
    """Work details section."""

    has_work_experience: bool | None = None
    work_experiences: list[Any] | None = None


class FinancialDetails(BaseModel):
    """Financials section."""

    personal_ever_employed: str | None = None
    mother_income_type: str | None = None
    father_income_type: str | None = None


class DocumentRef(BaseModel):
    """The part of an uploaded document the evaluator reads."""

    type: str | None = None


class DocumentDetails(BaseModel):
    """Documents section."""

    passport_photo: str | None = None
    documents: list[DocumentRef] = Field(default_factory=list)


class CourseDetails(BaseModel):
    """Course details section (set at onboarding, read-only)."""

    program: Program | None = None
    intake_year: int | None = None


class ProfileSnapshot(BaseModel):
    """Complete profile, grouped by section."""

    personal: PersonalDetails = Field(default_factory=PersonalDetails)
    education: EducationDetails = Field(default_factory=EducationDetails)
    travel: TravelDetails = Field(default_factory=TravelDetails)
    work: WorkDetails = Field(default_factory=WorkDetails)
    financials: FinancialDetails = Field(default_factory=FinancialDetails)
    documents: DocumentDetails = Field(default_factory=DocumentDetails)
    course: CourseDetails = Field(default_factory=CourseDetails)

    @classmethod
    def from_student(cls, student: Student) -> "ProfileSnapshot":
        """Build a snapshot from a Student row (documents must be loaded)."""
        return cls(
            personal=PersonalDetails(
                first_name=student.first_name,
                last_name=student.last_name,
                phone=student.phone,
                date_of_birth=student.date_of_birth,
                gender=student.gender,
                nationality=student.nationality,
                country_of_birth=student.country_of_birth,
                native_language=student.native_language,
                passport_number=student.passport_number,
                name_as_per_passport=student.name_as_per_passport,
                passport_issue_location=student.passport_issue_location,
                passport_issue_date=student.passport_issue_date,
                passport_expiry_date=student.passport_expiry_date,
                address=student.address,
                postal_code=student.postal_code,
            ),
            education=EducationDetails(
                school=student.school,
                school_grade=student.school_grade,
                high_school=student.high_school,
                high_school_grade=student.high_school_grade,
                gre_taken=student.gre_taken,
                toefl_taken=student.toefl_taken,
            ),
            travel=TravelDetails(
                travel_history=student.travel_history,
                visa_refused=student.visa_refused,
            ),
            work=WorkDetails(
                has_work_experience=student.has_work_experience,
                work_experiences=student.work_experiences,
            ),
            financials=FinancialDetails(
                personal_ever_employed=student.personal_ever_employed,
                mother_income_type=student.mother_income_type,
                father_income_type=student.father_income_type,
            ),
            documents=DocumentDetails(
                passport_photo=student.passport_photo,
                documents=[DocumentRef(type=doc.type) for doc in student.documents or []],
            ),
            course=CourseDetails(
                program=student.program,
                intake_year=student.intake_year,
            ),
        )
