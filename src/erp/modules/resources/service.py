"""
Resources Service Layer

Business logic for files admins publish to students.

This module implements:
1. Upload:
   - Audience validation (batch_id for BATCH, program for PROGRAM)
   - PDF and PowerPoint files only, up to the configured size
   - The stored file is removed again if the record cannot be written
2. Listing:
   - Everything for admins; the visible subset for students
3. Download:
   - Students may only download resources addressed to them
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.storage import LocalFileStorage
from erp.modules.batches import service as batches_service
from erp.modules.batches.models import Program
from erp.modules.resources import repository
from erp.modules.resources.models import Resource, ResourceVisibility
from erp.modules.resources.schemas import ResourceListResponse, ResourceResponse
from erp.modules.shared import ServiceError
from erp.modules.students import repository as students_repository
from erp.modules.students.models import Student
from erp.modules.students.service import StudentNotFoundError

logger = logging.getLogger(__name__)

ALLOWED_RESOURCE_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    }
)

# Subdirectory of the upload root
RESOURCES_DIR = "resources"


class ResourceServiceError(ServiceError):
    """Base exception for resource service errors."""


class InvalidResourceError(ResourceServiceError):
    """Raised when a resource upload fails validation."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_RESOURCE",
            status_code=400,
        )


class ResourceNotFoundError(ResourceServiceError):
    """Raised when a resource does not exist."""

    def __init__(self, resource_id: UUID):
        super().__init__(
            message=f"Resource {resource_id} not found",
            error_code="RESOURCE_NOT_FOUND",
            status_code=404,
        )


class ResourceAccessDeniedError(ResourceServiceError):
    """Raised when a student downloads a resource not addressed to them."""

    def __init__(self):
        super().__init__(
            message="You do not have access to this resource.",
            error_code="RESOURCE_ACCESS_DENIED",
            status_code=403,
        )


def resource_response(resource: Resource) -> ResourceResponse:
    return ResourceResponse(
        id=resource.id,
        title=resource.title,
        description=resource.description,
        file_name=resource.file_name,
        file_size=resource.file_size,
        mime_type=resource.mime_type,
        visibility_type=resource.visibility_type,
        program=resource.program,
        batch_id=resource.batch_id,
        batch_name=resource.batch.name if resource.batch else None,
        uploaded_at=resource.created_at,
    )


def is_visible_to(resource: Resource, student: Student) -> bool:
    """Whether a resource is addressed to the student."""
    if resource.visibility_type == ResourceVisibility.ALL:
        return True
    if resource.visibility_type == ResourceVisibility.PROGRAM:
        return resource.program == student.program
    return student.batch_id is not None and resource.batch_id == student.batch_id


def validate_resource_upload(
    *,
    visibility_type: ResourceVisibility,
    program: Program | None,
    batch_id: UUID | None,
    mime_type: str | None,
    size: int,
    max_size: int,
) -> None:
    """
    Raises:
        InvalidResourceError: On a missing audience target, wrong file type or size
    """
    if visibility_type == ResourceVisibility.BATCH and batch_id is None:
        raise InvalidResourceError("batch_id is required for batch visibility")
    if visibility_type == ResourceVisibility.PROGRAM and program is None:
        raise InvalidResourceError("program is required for program visibility")
    if mime_type not in ALLOWED_RESOURCE_MIME_TYPES:
        raise InvalidResourceError("Only PDF and PowerPoint files are allowed.")
    if size == 0:
        raise InvalidResourceError("The uploaded file is empty.")
    if size > max_size:
        raise InvalidResourceError(
            f"File exceeds the maximum size of {max_size // (1024 * 1024)} MB."
        )


async def upload_resource(
    db: AsyncSession,
    storage: LocalFileStorage,
    *,
    admin_id: UUID,
    title: str,
    description: str | None,
    visibility_type: ResourceVisibility,
    program: Program | None,
    batch_id: UUID | None,
    file_name: str,
    mime_type: str | None,
    content: bytes,
    max_size: int,
) -> ResourceResponse:
    """
    Validate, store and record a resource.

    Only the target matching the visibility type is kept.

    Raises:
        InvalidResourceError: If validation fails
        BatchNotFoundError: If the BATCH target does not exist
    """
    if not title.strip():
        raise InvalidResourceError("title is required")
    validate_resource_upload(
        visibility_type=visibility_type,
        program=program,
        batch_id=batch_id,
        mime_type=mime_type,
        size=len(content),
        max_size=max_size,
    )
    if visibility_type == ResourceVisibility.BATCH:
        await batches_service.get_batch_or_404(db, batch_id)

    stored = await storage.save(RESOURCES_DIR, file_name, content)
    try:
        resource = await repository.create(
            db,
            title=title.strip(),
            description=description or None,
            file_name=stored.file_name,
            stored_path=stored.stored_path,
            file_size=stored.file_size,
            mime_type=mime_type,
            visibility_type=visibility_type,
            program=program if visibility_type == ResourceVisibility.PROGRAM else None,
            batch_id=batch_id if visibility_type == ResourceVisibility.BATCH else None,
            uploaded_by_id=admin_id,
        )
    except Exception:
        await storage.delete(stored.stored_path)
        raise

    logger.info(f"Admin {admin_id} uploaded resource {resource.id} ({visibility_type.value})")
    return resource_response(resource)


async def list_resources(db: AsyncSession) -> ResourceListResponse:
    """Every resource (admin view)."""
    resources = await repository.list_all(db)
    return ResourceListResponse(resources=[resource_response(r) for r in resources])


async def list_student_resources(db: AsyncSession, user_id: UUID) -> ResourceListResponse:
    """Resources addressed to the current student. None without a profile."""
    student = await students_repository.get_by_user_id(db, user_id)
    if not student:
        return ResourceListResponse(resources=[])

    resources = await repository.list_visible_to(
        db, program=student.program, batch_id=student.batch_id
    )
    return ResourceListResponse(resources=[resource_response(r) for r in resources])


async def list_batch_resources(db: AsyncSession, user_id: UUID) -> ResourceListResponse:
    """
    Resources attached to the current student's batch.

    Raises:
        StudentNotFoundError: If the user has not onboarded
    """
    student = await students_repository.get_by_user_id(db, user_id)
    if not student:
        raise StudentNotFoundError()
    if student.batch_id is None:
        return ResourceListResponse(resources=[])

    resources = await repository.list_by_batch(db, student.batch_id)
    return ResourceListResponse(resources=[resource_response(r) for r in resources])


async def get_resource_file(
    db: AsyncSession,
    storage: LocalFileStorage,
    resource_id: UUID,
    *,
    student_user_id: UUID | None = None,
) -> tuple[Resource, bytes]:
    """
    Load a resource and its file contents.

    Args:
        student_user_id: When set, the download is checked against this
            student's program and batch

    Raises:
        ResourceNotFoundError: If the resource or its file is missing
        ResourceAccessDeniedError: If the student may not see the resource
    """
    resource = await repository.get_by_id(db, resource_id)
    if not resource:
        raise ResourceNotFoundError(resource_id)

    if student_user_id is not None:
        student = await students_repository.get_by_user_id(db, student_user_id)
        if not student or not is_visible_to(resource, student):
            raise ResourceAccessDeniedError()

    try:
        content = await storage.read(resource.stored_path)
    except FileNotFoundError as e:
        logger.error(f"File for resource {resource.id} is missing: {resource.stored_path}")
        raise ResourceNotFoundError(resource_id) from e

    return resource, content


async def delete_resource(
    db: AsyncSession, storage: LocalFileStorage, resource_id: UUID
) -> ResourceResponse:
    """
    Delete a resource and its file.

    Raises:
        ResourceNotFoundError: If the resource does not exist
    """
    resource = await repository.get_by_id(db, resource_id)
    if not resource:
        raise ResourceNotFoundError(resource_id)

    deleted = resource_response(resource)
    stored_path = resource.stored_path
    await repository.delete(db, resource)
    await storage.delete(stored_path)
    logger.info(f"Deleted resource {resource_id}")
    return deleted
