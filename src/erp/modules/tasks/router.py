"""
Tasks Router

Endpoints for the current student (student role):
- GET /student/tasks - Tasks assigned to the student or their batch
- PATCH /student/tasks/{assignment_id} - Update the student's status
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_student_user
from erp.core.database import get_db
from erp.modules.audit import record_audit
from erp.modules.students.service import StudentServiceError
from erp.modules.tasks import service
from erp.modules.tasks.schemas import (
    StudentTaskListResponse,
    StudentTaskResponse,
    TaskStatusUpdateRequest,
)
from erp.modules.tasks.service import TaskServiceError

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
    response_model=StudentTaskListResponse,
    summary="My Tasks",
)
async def list_my_tasks(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> StudentTaskListResponse:
    try:
        return await service.list_student_tasks(db, user.id)
    except Exception as e:
        raise _internal_error("Error listing student tasks", e) from e


@router.patch(
    "/{assignment_id}",
    response_model=StudentTaskResponse,
    summary="Update Task Status",
)
async def update_task_status(
    assignment_id: UUID,
    body: TaskStatusUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_student_user),
) -> StudentTaskResponse:
    try:
        task = await service.update_task_status(
            db,
            user_id=user.id,
            assignment_id=assignment_id,
            status=body.status,
        )
        await record_audit(
            db,
            user_id=user.id,
            action="UPDATE_TASK_STATUS",
            entity="TaskAssignment",
            entity_id=assignment_id,
            details={"status": body.status.value},
            ip_address=request.client.host if request.client else None,
        )
        return task
    except (TaskServiceError, StudentServiceError) as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error updating task status", e) from e
