"""
Students Schemas

Pydantic schemas for onboarding, profile updates and admin student views.
Profile updates are grouped by section; only the sections and fields sent
are changed.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from erp.modules.batches.models import Program
from erp.modules.students.completion import DocumentCategory
from erp.modules.students.profile import ProfileSnapshot

MIN_INTAKE_YEAR = 2020


# ============================================
# Onboarding
# ============================================


class OnboardingRequest(BaseModel):
    """Request body for POST /student/onboarding."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    program: Program
    intake_year: int = Field(..., ge=MIN_INTAKE_YEAR, le=2100)

    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    nationality: str | None = Field(None, max_length=100)
    country_of_birth: str | None = Field(None, max_length=100)
    native_language: str | None = Field(None, max_length=100)
    passport_number: str | None = Field(None, max_length=50)
    name_as_per_passport: str | None = Field(None, max_length=200)
    passport_issue_location: str | None = Field(None, max_length=100)
    passport_issue_date: date | None = None
    passport_expiry_date: date | None = None
    address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=20)


class BatchSummary(BaseModel):
    """The batch a student belongs to."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    program: Program
    intake_year: int
    is_active: bool


class OnboardingResponse(BaseModel):
    """Response after completing onboarding."""

    id: UUID
    first_name: str
    last_name: str
    program: Program
    intake_year: int
    batch_id: UUID
    message: str


class OnboardingStatusResponse(BaseModel):
    """Response for GET /student/onboarding."""

    has_completed_onboarding: bool
    student_id: UUID | None = None
    batch: BatchSummary | None = None


# ============================================
# Profile updates (one model per section)
# ============================================


class PersonalDetailsUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    nationality: str | None = Field(None, max_length=100)
    country_of_birth: str | None = Field(None, max_length=100)
    native_language: str | None = Field(None, max_length=100)
    passport_number: str | None = Field(None, max_length=50)
    name_as_per_passport: str | None = Field(None, max_length=200)
    passport_issue_location: str | None = Field(None, max_length=100)
    passport_issue_date: date | None = None
    passport_expiry_date: date | None = None
    address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=20)


class EducationUpdate(BaseModel):
    school: str | None = Field(None, max_length=200)
    school_grade: str | None = Field(None, max_length=20)
    high_school: str | None = Field(None, max_length=200)
    high_school_grade: str | None = Field(None, max_length=20)
    gre_taken: bool | None = None
    toefl_taken: bool | None = None


class TravelEntry(BaseModel):
    """A past trip abroad."""

    country: str = Field(..., min_length=1, max_length=100)
    from_date: date | None = None
    to_date: date | None = None
    purpose: str | None = Field(None, max_length=200)


class TravelUpdate(BaseModel):
    travel_history: list[TravelEntry] | None = None
    visa_refused: bool | None = None


class WorkExperienceEntry(BaseModel):
    """A past or current job."""

    company: str = Field(..., min_length=1, max_length=200)
    role: str | None = Field(None, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = Field(None, max_length=1000)


class WorkUpdate(BaseModel):
    has_work_experience: bool | None = None
    work_experiences: list[WorkExperienceEntry] | None = None


class FinancialsUpdate(BaseModel):
    personal_ever_employed: str | None = Field(None, max_length=50)
    mother_income_type: str | None = Field(None, max_length=50)
    father_income_type: str | None = Field(None, max_length=50)


class ProfileUpdateRequest(BaseModel):
    """
    Request body for PUT /student/profile.

    Send only the sections being edited. Within a section, fields that
    are sent (including explicit nulls) overwrite the stored value.
    """

    personal: PersonalDetailsUpdate | None = None
    education: EducationUpdate | None = None
    travel: TravelUpdate | None = None
    work: WorkUpdate | None = None
    financials: FinancialsUpdate | None = None

    def to_column_values(self) -> dict:
        """Flatten the sent sections into Student column values."""
        values: dict = {}
        for section in (self.personal, self.education, self.financials):
            if section is not None:
                values.update(section.model_dump(exclude_unset=True))

        # List fields are stored as JSONB; entries always carry every key
        for section in (self.travel, self.work):
            if section is not None:
                dumped = section.model_dump(mode="json")
                values.update({key: dumped[key] for key in section.model_fields_set})

        # first/last name are required columns
        for key in ("first_name", "last_name"):
            if key in values and values[key] is None:
                del values[key]
        return values


# ============================================
# Documents
# ============================================


class DocumentResponse(BaseModel):
    """An uploaded document."""

    id: UUID
    type: str
    category: DocumentCategory
    file_name: str
    file_size: int
    mime_type: str
    uploaded_at: datetime | None = None


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]


class PassportPhotoResponse(BaseModel):
    passport_photo: str = "uploaded"
    completion: float


# ============================================
# Profile responses
# ============================================


class SectionStatus(BaseModel):
    """Completion and visibility of one profile section."""

    completed: bool
    visible: bool


class StudentProfileResponse(BaseModel):
    """A student's full profile with its completion percentage."""

    id: UUID
    user_id: UUID
    email: EmailStr | None = None
    program: Program
    intake_year: int
    has_completed_onboarding: bool
    batch: BatchSummary | None = None
    profile: ProfileSnapshot
    documents: list[DocumentResponse]
    sections: dict[str, SectionStatus]
    completion: float


# ============================================
# Admin
# ============================================


class StudentListItem(BaseModel):
    """Student row in the admin list."""

    id: UUID
    first_name: str
    last_name: str
    email: str | None = None
    is_active: bool | None = None
    program: Program
    intake_year: int
    batch: BatchSummary | None = None
    completion: float
    created_at: datetime | None = None


class StudentListResponse(BaseModel):
    """Paginated admin student list."""

    students: list[StudentListItem]
    total: int
    page: int
    total_pages: int


class AssignBatchRequest(BaseModel):
    """Request body for POST /admin/students/assign-batch."""

    student_id: UUID
    batch_id: UUID


class StudentBatchResponse(BaseModel):
    """Response after changing a student's batch."""

    student_id: UUID
    batch: BatchSummary | None = None
    previous_batch_id: UUID | None = None
    message: str
