"""
Resources Admin Router

Endpoints:
- POST /admin/resources - Upload a resource (multipart)
- GET /admin/resources - List all resources
- GET /admin/resources/{id}/download - Download a resource
- DELETE /admin/resources/{id} - Delete a resource and its file
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

from erp.core.auth import CurrentUser, get_current_admin_user
from erp.core.config import settings
from erp.core.database import get_db
from erp.core.storage import LocalFileStorage, get_storage, read_upload
from erp.modules.audit import record_audit
from erp.modules.batches.models import Program
from erp.modules.batches.service import BatchServiceError
from erp.modules.resources import service
from erp.modules.resources.models import ResourceVisibility
from erp.modules.resources.router import file_response
from erp.modules.resources.schemas import ResourceListResponse, ResourceResponse
from erp.modules.resources.service import ResourceServiceError

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
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Resource",
    description="""
Publish a PDF or PowerPoint file to one batch (BATCH, needs batch_id),
one program (PROGRAM, needs program) or every student (ALL).
""",
)
async def upload_resource(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(..., max_length=200),
    description: str | None = Form(None, max_length=5000),
    visibility_type: ResourceVisibility = Form(...),
    program: Program | None = Form(None),
    batch_id: UUID | None = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ResourceResponse:
    try:
        content = await read_upload(file, settings.max_upload_size)
        resource = await service.upload_resource(
            db,
            storage,
            admin_id=admin.id,
            title=title,
            description=description,
            visibility_type=visibility_type,
            program=program,
            batch_id=batch_id,
            file_name=file.filename or "resource",
            mime_type=file.content_type,
            content=content,
            max_size=settings.max_upload_size,
        )
        await record_audit(
            db,
            user_id=admin.id,
            action="UPLOAD_RESOURCE",
            entity="Resource",
            entity_id=resource.id,
            details={"visibility_type": visibility_type.value, "title": resource.title},
            ip_address=_client_ip(request),
        )
        return resource
    except (ResourceServiceError, BatchServiceError) as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error uploading resource", e) from e


@router.get(
    "",
    response_model=ResourceListResponse,
    summary="List Resources",
)
async def list_resources(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> ResourceListResponse:
    try:
        return await service.list_resources(db)
    except Exception as e:
        raise _internal_error("Error listing resources", e) from e


@router.get(
    "/{resource_id}/download",
    summary="Download Resource",
)
async def download_resource(
    resource_id: UUID,
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> Response:
    try:
        resource, content = await service.get_resource_file(db, storage, resource_id)
        return file_response(resource, content)
    except ResourceServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error downloading resource", e) from e


@router.delete(
    "/{resource_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Resource",
)
async def delete_resource(
    resource_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> Response:
    try:
        resource = await service.delete_resource(db, storage, resource_id)
        await record_audit(
            db,
            user_id=admin.id,
            action="DELETE_RESOURCE",
            entity="Resource",
            entity_id=resource_id,
            details={"title": resource.title},
            ip_address=_client_ip(request),
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ResourceServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error deleting resource", e) from e
