"""
Students Admin Router

API endpoints for administrators to browse students and manage their
batch membership. All endpoints require the admin role.

Endpoints:
- GET /admin/students - List students with filters, search and completion
- GET /admin/students/{id} - Full student profile with completion
- POST /admin/students/assign-batch - Move a student into a batch
- POST /admin/students/{id}/remove-batch - Remove a student from their batch
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_admin_user
from erp.core.database import get_db
from erp.modules.audit import record_audit
from erp.modules.batches.models import Program
from erp.modules.batches.service import BatchServiceError
from erp.modules.students import service
from erp.modules.students.schemas import (
    AssignBatchRequest,
    StudentBatchResponse,
    StudentListResponse,
    StudentProfileResponse,
)
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


@router.get(
    "",
    response_model=StudentListResponse,
    summary="List Students",
)
async def list_students(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Page size"),
    batch_id: UUID | None = Query(None, description="Filter by batch"),
    program: Program | None = Query(None, description="Filter by program"),
    intake_year: int | None = Query(None, description="Filter by intake year"),
    search: str | None = Query(None, max_length=100, description="Name or email"),
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> StudentListResponse:
    """List students, newest first, with profile completion."""
    try:
        result = await service.list_students(
            db,
            page=page,
            limit=limit,
            batch_id=batch_id,
            program=program,
            intake_year=intake_year,
            search=search,
        )
        logger.info(f"Admin {admin.id} listed students: total={result.total}")
        return result
    except Exception as e:
        raise _internal_error("Error listing students", e) from e


# Declared before "/{student_id}" routes so the literal path wins
@router.post(
    "/assign-batch",
    response_model=StudentBatchResponse,
    summary="Assign Student to Batch",
)
async def assign_batch(
    body: AssignBatchRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> StudentBatchResponse:
    try:
        result = await service.assign_batch(db, body.student_id, body.batch_id)
        await record_audit(
            db,
            user_id=admin.id,
            action="ASSIGN_BATCH",
            entity="Student",
            entity_id=body.student_id,
            details={
                "old_batch_id": str(result.previous_batch_id) if result.previous_batch_id else None,
                "new_batch_id": str(body.batch_id),
            },
            ip_address=request.client.host if request.client else None,
        )
        return result
    except (StudentServiceError, BatchServiceError) as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error assigning batch", e) from e


@router.get(
    "/{student_id}",
    response_model=StudentProfileResponse,
    summary="Get Student",
)
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> StudentProfileResponse:
    try:
        return await service.get_student_profile(db, student_id)
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error getting student", e) from e


@router.post(
    "/{student_id}/remove-batch",
    response_model=StudentBatchResponse,
    summary="Remove Student from Batch",
)
async def remove_batch(
    student_id: UUID,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> StudentBatchResponse:
    try:
        result = await service.remove_batch(db, student_id)
        if result.previous_batch_id is not None:
            await record_audit(
                db,
                user_id=admin.id,
                action="REMOVE_BATCH",
                entity="Student",
                entity_id=student_id,
                details={"old_batch_id": str(result.previous_batch_id)},
                ip_address=request.client.host if request.client else None,
            )
        return result
    except StudentServiceError as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error removing batch", e) from e
