"""
Fixtures for students tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from erp.modules.batches.models import Batch, Program
from erp.modules.students.models import Student, StudentDocument
from erp.modules.students.profile import (
    DocumentDetails,
    DocumentRef,
    EducationDetails,
    FinancialDetails,
    PersonalDetails,
    ProfileSnapshot,
    TravelDetails,
    WorkDetails,
)
from erp.modules.students.schemas import OnboardingRequest


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db

@pytest.fixture
def mock_storage():
    """Create a mock upload storage."""
    storage = AsyncMock()
    storage.save = AsyncMock(
        return_value=MagicMock(
            stored_path="/uploads/student/file.pdf",
            file_name="file.pdf",
            file_size=1024,
        )
    )
    storage.delete = AsyncMock()
    return storage

@pytest.fixture
def mock_email_client():
    """Create a mock email client."""
    client = AsyncMock()
    client.send_onboarding_welcome = AsyncMock(return_value=True)
    return client

@pytest.fixture
def personal_complete():
    return PersonalDetails(
        first_name="Aisha",
        last_name="Khan",
        phone="+919876543210",
        date_of_birth=date(2003, 4, 12),
        gender="female",
        nationality="Indian",
    )

@pytest.fixture
def education_complete():
    return EducationDetails(
        school="Delhi Public School",
        school_grade="92%",
        high_school="Delhi Public School",
        high_school_grade="89%",
    )

@pytest.fixture
def complete_profile(personal_complete, education_complete):
    """Profile with all six fillable sections complete."""
    return ProfileSnapshot(
        personal=personal_complete,
        education=education_complete,
        travel=TravelDetails(travel_history=[], visa_refused=False),
        work=WorkDetails(has_work_experience=False),
        financials=FinancialDetails(
            personal_ever_employed="no",
            mother_income_type="salaried",
            father_income_type="business",
        ),
        documents=DocumentDetails(
            passport_photo="/uploads/photo.png",
            documents=[
                DocumentRef(type="PASSPORT"),
                DocumentRef(type="FATHER_ITR"),
            ],
        ),
    )

@pytest.fixture
def onboarding_request():
    return OnboardingRequest(
        first_name="Aisha",
        last_name="Khan",
        program=Program.BS,
        intake_year=2025,
        phone="+919876543210",
    )

@pytest.fixture
def sample_batch():
    batch = MagicMock(spec=Batch)
    batch.id = uuid4()
    batch.name = "BS-2025"
    batch.program = Program.BS
    batch.intake_year = 2025
    batch.is_active = True
    return batch

@pytest.fixture
def sample_student(sample_batch):
    """Onboarded student with an empty profile beyond onboarding fields."""
    student = MagicMock(spec=Student)
    student.id = uuid4()
    student.user_id = uuid4()
    student.user = MagicMock(email="aisha@example.com", is_active=True)
    student.batch_id = sample_batch.id
    student.batch = sample_batch
    student.program = Program.BS
    student.intake_year = 2025
    student.has_completed_onboarding = True
    student.first_name = "Aisha"
    student.last_name = "Khan"
    student.full_name = "Aisha Khan"
    for field in (
        "phone",
        "date_of_birth",
        "gender",
        "nationality",
        "country_of_birth",
        "native_language",
        "passport_number",
        "name_as_per_passport",
        "passport_issue_location",
        "passport_issue_date",
        "passport_expiry_date",
        "address",
        "postal_code",
        "school",
        "school_grade",
        "high_school",
        "high_school_grade",
        "gre_taken",
        "toefl_taken",
        "travel_history",
        "visa_refused",
        "has_work_experience",
        "work_experiences",
        "personal_ever_employed",
        "mother_income_type",
        "father_income_type",
        "passport_photo",
    ):
        setattr(student, field, None)
    student.documents = []
    student.created_at = datetime.now(UTC)
    return student

@pytest.fixture
def sample_document(sample_student):
    document = MagicMock(spec=StudentDocument)
    document.id = uuid4()
    document.student_id = sample_student.id
    document.type = "MOTHER_INCOME_PROOF"
    document.file_name = "income.pdf"
    document.stored_path = "/uploads/student/income.pdf"
    document.file_size = 2048
    document.mime_type = "application/pdf"
    document.uploaded_at = datetime.now(UTC)
    return document
