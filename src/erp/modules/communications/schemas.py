"""
Communications Schemas
"""

import enum
from uuid import UUID

from pydantic import BaseModel, Field

from erp.modules.batches.models import Program


class RecipientType(str, enum.Enum):
    """Audience of a bulk email."""

    BATCH = "BATCH"
    PROGRAM = "PROGRAM"
    ALL = "ALL"


class BulkEmailRequest(BaseModel):
    """
    Request body for POST /admin/emails/bulk.

    batch_id is required for BATCH, program for PROGRAM.
    """

    recipient_type: RecipientType
    batch_id: UUID | None = None
    program: Program | None = None
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=10000)


class BulkEmailResponse(BaseModel):
    """Response after queuing a bulk email."""

    success: bool = True
    recipient_count: int
    delivered_count: int
