"""
Students Router

API endpoints for the current student: onboarding, profile and documents.
All endpoints require the student role.

Endpoints:
- POST /student/onboarding - Complete onboarding
- GET /student/onboarding - Onboarding status
- GET /student/profile - Profile with section status and completion
- PUT /student/profile - Update profile sections
- GET /student/form-visibility - Visible sections for the student's batch
- POST /student/documents - Upload a document (multipart)
- GET /student/documents - List documents
- DELETE /student/documents/{id} - Delete a document
- POST /student/passport-photo - Upload passport photo (multipart)
"""

import logging
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_student_user
from erp.core.config import settings
from erp.core.database import get_db
from erp.core.email import EmailClient, get_email_client
from erp.core.storage import LocalFileStorage, get_storage, read_upload
from erp.modules.audit import record_audit
from erp.modules.batches.schemas import FormVisibilitySettings
from erp.modules.batches.service import BatchServiceError
from erp.modules.students import service
from erp.modules.students.schemas import (
    DocumentListResponse,
    DocumentResponse,
    OnboardingRequest,
    OnboardingResponse,
    OnboardingStatusResponse,
    PassportPhotoResponse,
    ProfileUpdateRequest,
    StudentProfileResponse,
)
from erp.modules.students.service import StudentServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _internal_error(message: str, e: Exception) -> HTTPException:
    logger.exception(f"{message}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


@router.post(
    "/onboarding",
    response_model=OnboardingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete Onboarding",
    description="""
Create the student profile and join the batch for the chosen program
and intake year. The batch is created if it does not exist yet.

A welcome email is sent after onboarding; email failures do not fail
the request.
""",
    responses={
        409: {
            "description": "Onboarding already completed",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "ONBOARDING_ALREADY_COMPLETED",
                            "message": "Onboarding has already been completed.",
                        }
                    }
                }
            },
        },
        503: {"description": "Batch could not be resolved, retry later"},
    },
)
async def complete_onboarding(
    body: OnboardingRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
    user: CurrentUser = Depends(get_current_student_user),
) -> OnboardingResponse:
    try:
        result = await service.complete_onboarding(
            db,
            user_id=user.id,
            email=user.email,
            data=body,
            email_client=email_client,
        )
        await record_audit(
            db,
            user_id=user.id,
            action="COMPLETE_ONBOARDING",
            entity="Student",
            entity_id=result.id,
            details={
                "program": body.program.value,
                "intake_year": body.intake_year,
                "batch_id": str(result.batch_id),
            },
            ip_address=_client_ip(request),
        )
        return result
    except (StudentServiceError, BatchServiceError) as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error completing onboarding", e) from e


@router.get(
    "/onboarding",
    response_model=OnboardingStatusResponse,
    summary="Get Onboarding Status",
)
async def get_onboarding_status(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> OnboardingStatusResponse:
    try:
        return await service.get_onboarding_status(db, user.id)
    except Exception as e:
        raise _internal_error("Error fetching onboarding status", e) from e


@router.get(
    "/profile",
    response_model=StudentProfileResponse,
    summary="Get Profile",
)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> StudentProfileResponse:
    """Profile sections, per-section status and completion percentage."""
    try:
        return await service.get_profile(db, user.id)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error fetching profile", e) from e


@router.put(
    "/profile",
    response_model=StudentProfileResponse,
    summary="Update Profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> StudentProfileResponse:
    """
    Update one or more profile sections.

    Only the sections and fields sent are changed.
    """
    try:
        profile, changed = await service.update_profile(db, user.id, body)
        if changed:
            await record_audit(
                db,
                user_id=user.id,
                action="UPDATE_PROFILE",
                entity="Student",
                entity_id=profile.id,
                details={"fields": changed, "completion": profile.completion},
                ip_address=_client_ip(request),
            )
        return profile
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error updating profile", e) from e


@router.get(
    "/form-visibility",
    response_model=FormVisibilitySettings,
    summary="Get Form Visibility",
)
async def get_form_visibility(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> FormVisibilitySettings:
    """Which profile sections the student's batch shows."""
    try:
        return await service.get_form_visibility(db, user.id)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error fetching form visibility", e) from e


@router.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
)
async def upload_document(
    request: Request,
    file: UploadFile = File(...),
    type: str = Form(..., description="Document type, e.g. PASSPORT or MOTHER_ITR"),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    user: CurrentUser = Depends(get_current_student_user),
) -> DocumentResponse:
    """Upload a PDF, PNG or JPEG document of a catalogued type."""
    try:
        content = await read_upload(file, settings.max_upload_size)
        document = await service.upload_document(
            db,
            storage,
            user.id,
            doc_type=type,
            file_name=file.filename or "upload",
            mime_type=file.content_type,
            content=content,
            max_size=settings.max_upload_size,
        )
        await record_audit(
            db,
            user_id=user.id,
            action="UPLOAD_DOCUMENT",
            entity="StudentDocument",
            entity_id=document.id,
            details={"type": document.type, "file_name": document.file_name},
            ip_address=_client_ip(request),
        )
        return document
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error uploading document", e) from e


@router.get(
    "/documents",
    response_model=DocumentListResponse,
    summary="List Documents",
)
async def list_documents(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> DocumentListResponse:
    try:
        documents = await service.list_documents(db, user.id)
        return DocumentListResponse(documents=documents)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error listing documents", e) from e


@router.delete(
    "/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
)
async def delete_document(
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    user: CurrentUser = Depends(get_current_student_user),
) -> Response:
    try:
        await service.delete_document(db, storage, user.id, document_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error deleting document", e) from e


@router.post(
    "/passport-photo",
    response_model=PassportPhotoResponse,
    summary="Upload Passport Photo",
)
async def upload_passport_photo(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    user: CurrentUser = Depends(get_current_student_user),
) -> PassportPhotoResponse:
    """Upload a PNG or JPEG passport photo (max 5 MB), replacing any previous one."""
    try:
        content = await read_upload(file, service.PASSPORT_PHOTO_MAX_SIZE)
        return await service.upload_passport_photo(
            db,
            storage,
            user.id,
            file_name=file.filename or "passport-photo",
            mime_type=file.content_type,
            content=content,
        )
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error uploading passport photo", e) from e
