"""
Batches Schemas

Pydantic schemas for batch administration and form visibility.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from erp.modules.batches.models import Program


class BatchResponse(BaseModel):
    """A batch with its student count."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    program: Program
    intake_year: int
    description: str | None = None
    is_active: bool
    student_count: int = 0
    created_at: datetime | None = None


class BatchListResponse(BaseModel):
    """Paginated batch list."""

    batches: list[BatchResponse]
    total: int
    page: int
    total_pages: int


class BatchUpdateRequest(BaseModel):
    """Request body for PATCH /admin/batches/{id}."""

    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=2000)
    is_active: bool | None = None


class FormVisibilitySettings(BaseModel):
    """Visibility of each profile section. Every section defaults to visible."""

    personal_details: bool = True
    education: bool = True
    travel: bool = True
    work_details: bool = True
    financials: bool = True
    documents: bool = True
    course_details: bool = True
    university: bool = True
    post_admission: bool = True


class FormVisibilityUpdate(BaseModel):
    """
    Request body for PUT /admin/form-visibility/{batch_id}.

    Omitted sections become visible.
    """

    personal_details: bool | None = None
    education: bool | None = None
    travel: bool | None = None
    work_details: bool | None = None
    financials: bool | None = None
    documents: bool | None = None
    course_details: bool | None = None
    university: bool | None = None
    post_admission: bool | None = None


class BatchVisibilityItem(BaseModel):
    """An active batch with its visibility settings."""

    id: UUID
    name: str
    program: Program
    intake_year: int
    student_count: int
    form_visibility: FormVisibilitySettings


class FormVisibilityListResponse(BaseModel):
    """Response for GET /admin/form-visibility."""

    batches: list[BatchVisibilityItem]


class FormVisibilityUpdateResponse(BaseModel):
    """Response for PUT /admin/form-visibility/{batch_id}."""

    batch_id: UUID
    form_visibility: FormVisibilitySettings
    message: str
