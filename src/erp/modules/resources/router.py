"""
Resources Router

Endpoints for the current student (student role):
- GET /student/resources - Resources addressed to the student
- GET /student/batch-resources - Resources attached to the student's batch
- GET /student/resources/{id}/download - Download a resource
"""

import logging
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_student_user
from erp.core.database import get_db
from erp.core.storage import LocalFileStorage, get_storage
from erp.modules.resources import service
from erp.modules.resources.models import Resource
from erp.modules.resources.schemas import ResourceListResponse
from erp.modules.resources.service import ResourceServiceError
from erp.modules.students.service import StudentServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(message: str, e: Exception) -> HTTPException:
    logger.exception(f"{message}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def file_response(resource: Resource, content: bytes) -> Response:
    """Attachment response carrying a resource's file."""
    return Response(
        content=content,
        media_type=resource.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(resource.file_name)}"
        },
    )


@router.get(
    "/resources",
    response_model=ResourceListResponse,
    summary="My Resources",
)
async def list_my_resources(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> ResourceListResponse:
    """Resources published to everyone, the student's program, or their batch."""
    try:
        return await service.list_student_resources(db, user.id)
    except Exception as e:
        raise _internal_error("Error listing resources", e) from e


@router.get(
    "/batch-resources",
    response_model=ResourceListResponse,
    summary="Batch Resources",
)
async def list_batch_resources(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> ResourceListResponse:
    try:
        return await service.list_batch_resources(db, user.id)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error listing batch resources", e) from e


@router.get(
    "/resources/{resource_id}/download",
    summary="Download Resource",
    responses={403: {"description": "Resource not addressed to the student"}},
)
async def download_resource(
    resource_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    user: CurrentUser = Depends(get_current_student_user),
) -> Response:
    try:
        resource, content = await service.get_resource_file(
            db, storage, resource_id, student_user_id=user.id
        )
        return file_response(resource, content)
    except ResourceServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error downloading resource", e) from e
