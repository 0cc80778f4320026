"""
Tasks Admin Router

Endpoints:
- POST /admin/tasks - Create and assign a task
- GET /admin/tasks - List tasks with their assignments
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.auth import CurrentUser, get_current_admin_user
from erp.core.database import get_db
from erp.modules.audit import record_audit
from erp.modules.batches.service import BatchServiceError
from erp.modules.students.service import StudentServiceError
from erp.modules.tasks import service
from erp.modules.tasks.schemas import TaskCreateRequest, TaskListResponse, TaskResponse
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


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="""
Create a task and assign it to a student (INDIVIDUAL), a batch (BATCH),
or every active batch of a program (PROGRAM).
""",
)
async def create_task(
    body: TaskCreateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> TaskResponse:
    try:
        task = await service.create_task(db, admin_id=admin.id, data=body)
        await record_audit(
            db,
            user_id=admin.id,
            action="CREATE_TASK",
            entity="Task",
            entity_id=task.id,
            details={
                "assignment_type": task.assignment_type.value,
                "assignments": len(task.assignments),
            },
            ip_address=request.client.host if request.client else None,
        )
        return task
    except (TaskServiceError, StudentServiceError, BatchServiceError) as e:
        raise e.to_http_exception() from e
    except Exception as e:
        raise _internal_error("Error creating task", e) from e


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List Tasks",
)
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin_user),
) -> TaskListResponse:
    try:
        return await service.list_tasks(db)
    except Exception as e:
        raise _internal_error("Error listing tasks", e) from e
