"""
Resource Models
"""

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.modules.batches.models import Batch, Program
from erp.modules.shared import BaseModel


class ResourceVisibility(str, enum.Enum):
    """Audience of a resource."""

    BATCH = "BATCH"
    PROGRAM = "PROGRAM"
    ALL = "ALL"


class Resource(BaseModel):
    """
    A file published by an admin.

    BATCH resources carry batch_id, PROGRAM resources carry program,
    ALL resources carry neither. created_at is the upload time.
    """

    __tablename__ = "resources"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    stored_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(150), nullable=False)
    visibility_type: Mapped[ResourceVisibility] = mapped_column(
        Enum(ResourceVisibility, name="resource_visibility"),
        nullable=False,
    )
    program: Mapped[Program | None] = mapped_column(
        Enum(Program, name="program"),
        nullable=True,
    )
    batch_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    uploaded_by_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    batch: Mapped[Batch | None] = relationship(Batch, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, title={self.title}, visibility={self.visibility_type})>"
