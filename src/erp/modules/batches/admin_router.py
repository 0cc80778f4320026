"""
Batches Admin Router

API endpoints for administrators to manage batches and their form
visibility settings. All endpoints require the admin role.

Endpoints:
- GET /admin/batches - List batches with filters and pagination
- GET /admin/batches/{id} - Get batch with student count
- PATCH /admin/batches/{id} - Rename, describe, activate/deactivate
- GET /admin/form-visibility - Visibility settings of every active batch
- PUT /admin/form-visibility/{batch_id} - Replace a batch's visibility settings
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_admin_user
from erp.core.database import get_db
from erp.modules.audit import record_audit
from erp.modules.batches import service
from erp.modules.batches.models import Program
from erp.modules.batches.schemas import (
    BatchListResponse,
    BatchResponse,
    BatchUpdateRequest,
    FormVisibilityListResponse,
    FormVisibilityUpdate,
    FormVisibilityUpdateResponse,
)
from erp.modules.batches.service import BatchServiceError

logger = logging.getLogger(__name__)

batches_router = APIRouter()
visibility_router = APIRouter()


def _internal_error(message: str, e: Exception) -> HTTPException:
    logger.exception(f"{message}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


@batches_router.get(
    "",
    response_model=BatchListResponse,
    summary="List Batches",
)
async def list_batches(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    program: Program | None = Query(None, description="Filter by program"),
    is_active: bool | None = Query(None, description="Filter by active flag"),
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> BatchListResponse:
    """List batches, newest intake first, with student counts."""
    try:
        result = await service.get_batches(
            db, page=page, limit=limit, program=program, is_active=is_active
        )
        logger.info(f"Admin {admin.id} listed batches: total={result.total}")
        return result
    except BatchServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error listing batches", e) from e


@batches_router.get(
    "/{batch_id}",
    response_model=BatchResponse,
    summary="Get Batch",
)
async def get_batch(
    batch_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> BatchResponse:
    """Get a batch with its student count."""
    try:
        return await service.get_batch_with_stats(db, batch_id)
    except BatchServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error getting batch", e) from e


@batches_router.patch(
    "/{batch_id}",
    response_model=BatchResponse,
    summary="Update Batch",
)
async def update_batch(
    batch_id: UUID,
    body: BatchUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> BatchResponse:
    """
    Update a batch's name, description or active flag.

    Deactivated batches keep their students but drop out of the
    form visibility listing.
    """
    try:
        result = await service.update_batch(
            db,
            batch_id,
            name=body.name,
            description=body.description,
            is_active=body.is_active,
        )
        await record_audit(
            db,
            user_id=admin.id,
            action="UPDATE_BATCH",
            entity="Batch",
            entity_id=batch_id,
            details=body.model_dump(exclude_none=True),
            ip_address=request.client.host if request.client else None,
        )
        return result
    except BatchServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error updating batch", e) from e


@visibility_router.get(
    "",
    response_model=FormVisibilityListResponse,
    summary="List Form Visibility Settings",
)
async def list_form_visibility(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> FormVisibilityListResponse:
    """Form visibility of every active batch. Batches without settings show all sections."""
    try:
        batches = await service.get_visibility_settings(db)
        return FormVisibilityListResponse(batches=batches)
    except Exception as e:
        raise _internal_error("Error fetching form visibility settings", e) from e


@visibility_router.put(
    "/{batch_id}",
    response_model=FormVisibilityUpdateResponse,
    summary="Update Form Visibility",
)
async def update_form_visibility(
    batch_id: UUID,
    body: FormVisibilityUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> FormVisibilityUpdateResponse:
    """Create or replace a batch's visibility settings. Omitted sections become visible."""
    try:
        stored = await service.set_visibility(db, batch_id, body.model_dump())
        await record_audit(
            db,
            user_id=admin.id,
            action="UPDATE_FORM_VISIBILITY",
            entity="Batch",
            entity_id=batch_id,
            details=stored.model_dump(),
            ip_address=request.client.host if request.client else None,
        )
        return FormVisibilityUpdateResponse(
            batch_id=batch_id,
            form_visibility=stored,
            message="Form visibility settings updated successfully",
        )
    except BatchServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error updating form visibility settings", e) from e
