from fastapi import APIRouter

from erp.modules.auth import router as auth_router
from erp.modules.batches.admin_router import batches_router, visibility_router
from erp.modules.communications.admin_router import router as admin_emails_router
from erp.modules.resources.admin_router import router as admin_resources_router
from erp.modules.resources.router import router as student_resources_router
from erp.modules.students.admin_router import router as admin_students_router
from erp.modules.students.router import router as student_router
from erp.modules.tasks.admin_router import router as admin_tasks_router
from erp.modules.tasks.router import router as student_tasks_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(student_router, prefix="/student", tags=["Student"])

api_router.include_router(student_tasks_router, prefix="/student/tasks", tags=["Student - Tasks"])

api_router.include_router(student_resources_router, prefix="/student", tags=["Student - Resources"])

api_router.include_router(batches_router, prefix="/admin/batches", tags=["Admin - Batches"])

api_router.include_router(
    visibility_router,
    prefix="/admin/form-visibility",
    tags=["Admin - Form Visibility"],
)

api_router.include_router(
    admin_students_router,
    prefix="/admin/students",
    tags=["Admin - Students"],
)

api_router.include_router(
    admin_emails_router,
    prefix="/admin/emails",
    tags=["Admin - Communications"],
)

api_router.include_router(admin_tasks_router, prefix="/admin/tasks", tags=["Admin - Tasks"])

api_router.include_router(
    admin_resources_router,
    prefix="/admin/resources",
    tags=["Admin - Resources"],
)
