"""
Resource Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from erp.modules.batches.models import Program
from erp.modules.resources.models import ResourceVisibility


class ResourceResponse(BaseModel):
    """A published resource (file contents are downloaded separately)."""

    id: UUID
    title: str
    description: str | None = None
    file_name: str
    file_size: int
    mime_type: str
    visibility_type: ResourceVisibility
    program: Program | None = None
    batch_id: UUID | None = None
    batch_name: str | None = None
    uploaded_at: datetime


class ResourceListResponse(BaseModel):
    resources: list[ResourceResponse]
