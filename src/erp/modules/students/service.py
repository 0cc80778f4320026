"""
Students Service Layer

Business logic for student onboarding, profiles and documents.

This module implements:
1. Onboarding:
   - One profile per user; a second onboarding is refused
   - The batch for (program, intake_year) is resolved (found or created)
   - Welcome email after onboarding (non-blocking)

2. Profile:
   - Section-wise partial updates
   - Completion percentage against the batch's form visibility

3. Documents:
   - Upload validation (type catalog, MIME type, size)
   - Passport photo replacement

4. Administration:
   - Paginated listing with completion per student
   - Assigning students to, and removing them from, batches
"""

import logging
import math
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.email import EmailClient
from erp.core.storage import LocalFileStorage
from erp.modules.batches import service as batches_service
from erp.modules.batches.helpers import generate_batch_name
from erp.modules.batches.models import Program
from erp.modules.batches.schemas import FormVisibilitySettings
from erp.modules.shared import ServiceError
from erp.modules.students import repository
from erp.modules.students.completion import (
    calculate_profile_completion,
    classify_document_type,
    evaluate_sections,
    is_section_visible,
)
from erp.modules.students.models import DocumentType, Student, StudentDocument
from erp.modules.students.profile import ProfileSnapshot
from erp.modules.students.schemas import (
    BatchSummary,
    DocumentResponse,
    OnboardingRequest,
    OnboardingResponse,
    OnboardingStatusResponse,
    PassportPhotoResponse,
    ProfileUpdateRequest,
    SectionStatus,
    StudentBatchResponse,
    StudentListItem,
    StudentListResponse,
    StudentProfileResponse,
)

logger = logging.getLogger(__name__)

ALLOWED_DOCUMENT_MIME_TYPES = frozenset({"application/pdf", "image/png", "image/jpeg"})
ALLOWED_PHOTO_MIME_TYPES = frozenset({"image/png", "image/jpeg"})
PASSPORT_PHOTO_MAX_SIZE = 5 * 1024 * 1024


class StudentServiceError(ServiceError):
    """Base exception for student service errors."""


class StudentNotFoundError(StudentServiceError):
    """Raised when a student profile does not exist."""

    def __init__(self, message: str = "Student profile not found. Complete onboarding first."):
        super().__init__(
            message=message,
            error_code="STUDENT_NOT_FOUND",
            status_code=404,
        )


class OnboardingAlreadyCompletedError(StudentServiceError):
    """Raised when a user who already has a profile tries to onboard again."""

    def __init__(self):
        super().__init__(
            message="Onboarding has already been completed.",
            error_code="ONBOARDING_ALREADY_COMPLETED",
            status_code=409,
        )


class DocumentNotFoundError(StudentServiceError):
    """Raised when a document does not exist or belongs to someone else."""

    def __init__(self, document_id: UUID):
        super().__init__(
            message=f"Document {document_id} not found",
            error_code="DOCUMENT_NOT_FOUND",
            status_code=404,
        )


class InvalidUploadError(StudentServiceError):
    """Raised when an uploaded file fails validation."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_UPLOAD",
            status_code=400,
        )


# ============================================
# Response builders
# ============================================


def _batch_summary(student: Student) -> BatchSummary | None:
    if student.batch is None:
        return None
    return BatchSummary.model_validate(student.batch)


def _document_response(document: StudentDocument) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        type=document.type,
        category=classify_document_type(document.type),
        file_name=document.file_name,
        file_size=document.file_size,
        mime_type=document.mime_type,
        uploaded_at=document.uploaded_at,
    )


async def build_profile_response(db: AsyncSession, student: Student) -> StudentProfileResponse:
    """
    Build the full profile view of a student, scored against the
    visibility settings of the student's batch.
    """
    visibility = await batches_service.get_visibility_for_batch(db, student.batch_id)
    snapshot = ProfileSnapshot.from_student(student)
    statuses = evaluate_sections(snapshot)

    return StudentProfileResponse(
        id=student.id,
        user_id=student.user_id,
        email=student.user.email if student.user else None,
        program=student.program,
        intake_year=student.intake_year,
        has_completed_onboarding=student.has_completed_onboarding,
        batch=_batch_summary(student),
        profile=snapshot,
        documents=[_document_response(doc) for doc in student.documents or []],
        sections={
            section.value: SectionStatus(
                completed=completed,
                visible=is_section_visible(visibility, section),
            )
            for section, completed in statuses.items()
        },
        completion=calculate_profile_completion(snapshot, visibility),
    )


async def _get_student_for_user(db: AsyncSession, user_id: UUID) -> Student:
    student = await repository.get_by_user_id(db, user_id)
    if not student:
        raise StudentNotFoundError()
    return student


# ============================================
# Onboarding
# ============================================


async def complete_onboarding(
    db: AsyncSession,
    *,
    user_id: UUID,
    email: str,
    data: OnboardingRequest,
    email_client: EmailClient | None = None,
) -> OnboardingResponse:
    """
    Create the student's profile and place them in the batch for their
    program and intake year.

    Args:
        db: Database session
        user_id: The onboarding user
        email: The user's email (for the welcome email)
        data: Onboarding request
        email_client: Client for the welcome email (optional)

    Returns:
        OnboardingResponse with the new profile and batch ID

    Raises:
        OnboardingAlreadyCompletedError: If the user already has a profile
        BatchResolutionError: If the batch could not be resolved
    """
    if await repository.get_by_user_id(db, user_id):
        logger.warning(f"Repeated onboarding attempt by user {user_id}")
        raise OnboardingAlreadyCompletedError()

    batch_id = await batches_service.resolve_batch(db, data.program, data.intake_year)

    try:
        student = await repository.create(db, user_id=user_id, batch_id=batch_id, data=data)
    except IntegrityError as e:
        # A concurrent onboarding of the same user won the unique user_id
        await db.rollback()
        raise OnboardingAlreadyCompletedError() from e

    logger.info(f"Student {student.id} onboarded into batch {batch_id}")

    # Send welcome email (non-blocking - log error but don't fail the request)
    if email_client is not None:
        batch_name = (
            student.batch.name
            if student.batch is not None
            else generate_batch_name(data.program, data.intake_year)
        )
        try:
            sent = await email_client.send_onboarding_welcome(
                to_email=email,
                student_name=student.full_name,
                batch_name=batch_name,
            )
            if not sent:
                logger.error(f"Failed to send welcome email to student {student.id}")
        except Exception as e:
            logger.error(f"Exception sending welcome email to student {student.id}: {e}")

    return OnboardingResponse(
        id=student.id,
        first_name=student.first_name,
        last_name=student.last_name,
        program=student.program,
        intake_year=student.intake_year,
        batch_id=batch_id,
        message="Onboarding completed successfully",
    )


async def get_onboarding_status(db: AsyncSession, user_id: UUID) -> OnboardingStatusResponse:
    """Whether the user has onboarded, and their batch."""
    student = await repository.get_by_user_id(db, user_id)
    if not student:
        return OnboardingStatusResponse(has_completed_onboarding=False)

    return OnboardingStatusResponse(
        has_completed_onboarding=student.has_completed_onboarding,
        student_id=student.id,
        batch=_batch_summary(student),
    )


# ============================================
# Profile
# ============================================


async def get_profile(db: AsyncSession, user_id: UUID) -> StudentProfileResponse:
    """Profile of the current student."""
    student = await _get_student_for_user(db, user_id)
    return await build_profile_response(db, student)


async def update_profile(
    db: AsyncSession,
    user_id: UUID,
    data: ProfileUpdateRequest,
) -> tuple[StudentProfileResponse, list[str]]:
    """
    Apply a section-wise profile update.

    Returns:
        Tuple of (updated profile, names of the changed fields)
    """
    student = await _get_student_for_user(db, user_id)

    values = data.to_column_values()
    if values:
        student = await repository.update_fields(db, student, values)
        logger.info(f"Student {student.id} updated profile fields: {sorted(values)}")

    return await build_profile_response(db, student), sorted(values)


async def get_form_visibility(db: AsyncSession, user_id: UUID) -> FormVisibilitySettings:
    """Section visibility for the current student's batch."""
    student = await _get_student_for_user(db, user_id)
    visibility = await batches_service.get_visibility_for_batch(db, student.batch_id)
    return FormVisibilitySettings(**visibility)


# ============================================
# Documents
# ============================================


def validate_document_upload(
    doc_type: str,
    mime_type: str | None,
    size: int,
    max_size: int,
) -> None:
    """
    Validate an upload against the document catalog and file limits.

    Raises:
        InvalidUploadError: On unknown type, disallowed MIME type, empty or oversized file
    """
    if doc_type not in DocumentType._value2member_map_:
        raise InvalidUploadError(f"Unknown document type: {doc_type}")
    if mime_type not in ALLOWED_DOCUMENT_MIME_TYPES:
        raise InvalidUploadError("Only PDF, PNG and JPEG files are allowed.")
    if size == 0:
        raise InvalidUploadError("The uploaded file is empty.")
    if size > max_size:
        raise InvalidUploadError(
            f"File exceeds the maximum size of {max_size // (1024 * 1024)} MB."
        )


async def upload_document(
    db: AsyncSession,
    storage: LocalFileStorage,
    user_id: UUID,
    *,
    doc_type: str,
    file_name: str,
    mime_type: str | None,
    content: bytes,
    max_size: int,
) -> DocumentResponse:
    """
    Validate, store and record an uploaded document.

    Raises:
        StudentNotFoundError: If the user has not onboarded
        InvalidUploadError: If the file fails validation
    """
    student = await _get_student_for_user(db, user_id)
    validate_document_upload(doc_type, mime_type, len(content), max_size)

    stored = await storage.save(str(student.id), file_name, content)
    try:
        document = await repository.create_document(
            db,
            student_id=student.id,
            doc_type=doc_type,
            file_name=stored.file_name,
            stored_path=stored.stored_path,
            file_size=stored.file_size,
            mime_type=mime_type,
        )
    except Exception:
        await storage.delete(stored.stored_path)
        raise

    logger.info(f"Student {student.id} uploaded document {document.id} ({doc_type})")
    return _document_response(document)


async def list_documents(db: AsyncSession, user_id: UUID) -> list[DocumentResponse]:
    """Documents of the current student."""
    student = await _get_student_for_user(db, user_id)
    documents = await repository.list_documents(db, student.id)
    return [_document_response(doc) for doc in documents]


async def delete_document(
    db: AsyncSession,
    storage: LocalFileStorage,
    user_id: UUID,
    document_id: UUID,
) -> None:
    """
    Delete one of the current student's documents and its file.

    Raises:
        DocumentNotFoundError: If the document does not belong to the student
    """
    student = await _get_student_for_user(db, user_id)
    document = await repository.get_document(db, student.id, document_id)
    if not document:
        raise DocumentNotFoundError(document_id)

    stored_path = document.stored_path
    await repository.delete_document(db, document)
    await storage.delete(stored_path)
    logger.info(f"Student {student.id} deleted document {document_id}")


async def upload_passport_photo(
    db: AsyncSession,
    storage: LocalFileStorage,
    user_id: UUID,
    *,
    file_name: str,
    mime_type: str | None,
    content: bytes,
) -> PassportPhotoResponse:
    """
    Store a new passport photo, replacing the previous one.

    Raises:
        InvalidUploadError: If the file is not a PNG/JPEG image up to 5 MB
    """
    student = await _get_student_for_user(db, user_id)

    if mime_type not in ALLOWED_PHOTO_MIME_TYPES:
        raise InvalidUploadError("Passport photo must be a PNG or JPEG image.")
    if not content:
        raise InvalidUploadError("The uploaded file is empty.")
    if len(content) > PASSPORT_PHOTO_MAX_SIZE:
        raise InvalidUploadError("Passport photo exceeds the maximum size of 5 MB.")

    previous = student.passport_photo
    stored = await storage.save(str(student.id), file_name, content)
    try:
        student = await repository.update_fields(
            db, student, {"passport_photo": stored.stored_path}
        )
    except Exception:
        await storage.delete(stored.stored_path)
        raise

    if previous:
        await storage.delete(previous)

    profile = await build_profile_response(db, student)
    return PassportPhotoResponse(completion=profile.completion)


# ============================================
# Administration
# ============================================


async def list_students(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 20,
    batch_id: UUID | None = None,
    program: Program | None = None,
    intake_year: int | None = None,
    search: str | None = None,
) -> StudentListResponse:
    """
    Paginated student list with completion per student.

    Visibility is looked up once per batch on the page.
    """
    students, total = await repository.list_for_admin(
        db,
        batch_id=batch_id,
        program=program,
        intake_year=intake_year,
        search=search,
        skip=(page - 1) * limit,
        limit=limit,
    )

    visibility_by_batch: dict[UUID | None, dict[str, bool]] = {}
    items = []
    for student in students:
        if student.batch_id not in visibility_by_batch:
            visibility_by_batch[student.batch_id] = await batches_service.get_visibility_for_batch(
                db, student.batch_id
            )
        completion = calculate_profile_completion(
            ProfileSnapshot.from_student(student),
            visibility_by_batch[student.batch_id],
        )
        items.append(
            StudentListItem(
                id=student.id,
                first_name=student.first_name,
                last_name=student.last_name,
                email=student.user.email if student.user else None,
                is_active=student.user.is_active if student.user else None,
                program=student.program,
                intake_year=student.intake_year,
                batch=_batch_summary(student),
                completion=completion,
                created_at=student.created_at,
            )
        )

    return StudentListResponse(
        students=items,
        total=total,
        page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
    )


async def get_student_or_404(db: AsyncSession, student_id: UUID) -> Student:
    """
    Get a student by ID.

    Raises:
        StudentNotFoundError: If the student does not exist
    """
    student = await repository.get_by_id(db, student_id)
    if not student:
        raise StudentNotFoundError(f"Student {student_id} not found")
    return student


async def get_student_profile(db: AsyncSession, student_id: UUID) -> StudentProfileResponse:
    """Full profile of any student (admin view)."""
    student = await get_student_or_404(db, student_id)
    return await build_profile_response(db, student)


async def assign_batch(db: AsyncSession, student_id: UUID, batch_id: UUID) -> StudentBatchResponse:
    """
    Move a student into a batch.

    Raises:
        StudentNotFoundError: If the student does not exist
        BatchNotFoundError: If the batch does not exist
    """
    student = await get_student_or_404(db, student_id)
    batch = await batches_service.get_batch_or_404(db, batch_id)

    previous_batch_id = student.batch_id
    await repository.set_batch(db, student, batch.id)
    logger.info(f"Student {student_id} moved from batch {previous_batch_id} to {batch.id}")

    return StudentBatchResponse(
        student_id=student_id,
        batch=BatchSummary.model_validate(batch),
        previous_batch_id=previous_batch_id,
        message=f"Student assigned to batch {batch.name}",
    )


async def remove_batch(db: AsyncSession, student_id: UUID) -> StudentBatchResponse:
    """
    Remove a student from their batch. Unassigned students see every section.

    Raises:
        StudentNotFoundError: If the student does not exist
    """
    student = await get_student_or_404(db, student_id)

    previous_batch_id = student.batch_id
    if previous_batch_id is not None:
        await repository.set_batch(db, student, None)
        logger.info(f"Student {student_id} removed from batch {previous_batch_id}")

    return StudentBatchResponse(
        student_id=student_id,
        batch=None,
        previous_batch_id=previous_batch_id,
        message=(
            "Student removed from batch"
            if previous_batch_id is not None
            else "Student was not assigned to a batch"
        ),
    )
