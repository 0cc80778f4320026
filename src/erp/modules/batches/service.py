"""
Batches Service Layer

Business logic for batch resolution and administration.

This module implements:
1. Batch Resolution:
   - Find-or-create the batch for (program, intake_year) at onboarding
   - At most one batch per key, even under concurrent onboarding requests
   - A caller that loses the creation race gets the winner's batch

2. Batch Administration:
   - Paginated listing with student counts
   - Rename, describe, activate/deactivate

3. Form Visibility:
   - Per-batch section visibility, defaulting to all sections visible
"""

import logging
import math
from collections.abc import Mapping
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.config import settings
from erp.modules.batches import repository
from erp.modules.batches.helpers import (
    default_visibility,
    generate_batch_name,
    visibility_to_dict,
)
from erp.modules.batches.models import Batch, Program
from erp.modules.batches.schemas import (
    BatchListResponse,
    BatchResponse,
    BatchVisibilityItem,
    FormVisibilitySettings,
)
from erp.modules.shared import ServiceError
from erp.modules.students.sections import ProfileSection

logger = logging.getLogger(__name__)


class BatchServiceError(ServiceError):
    """Base exception for batch service errors."""


class BatchNotFoundError(BatchServiceError):
    """Raised when a batch is not found."""

    def __init__(self, batch_id: UUID | None = None):
        message = f"Batch {batch_id} not found" if batch_id else "Batch not found"
        super().__init__(
            message=message,
            error_code="BATCH_NOT_FOUND",
            status_code=404,
        )


class BatchResolutionError(BatchServiceError):
    """Raised when the batch for a key could not be resolved after retrying."""

    def __init__(self, program: Program, intake_year: int):
        super().__init__(
            message=(
                f"Could not resolve batch for {program.value} {intake_year}. "
                "Please try again."
            ),
            error_code="BATCH_RESOLUTION_FAILED",
            status_code=503,
        )


# ============================================
# Batch Resolution
# ============================================


async def resolve_batch(db: AsyncSession, program: Program, intake_year: int) -> UUID:
    """
    Get the ID of the batch for (program, intake_year), creating it if needed.

    The insert uses ON CONFLICT DO NOTHING against the unique
    (program, intake_year) constraint. When a concurrent request creates
    the batch first, the insert returns nothing and the lookup is repeated
    to pick up the winner's row. A unique-constraint violation is handled
    the same way.

    Args:
        db: Database session
        program: Program of the student
        intake_year: Intake year of the student

    Returns:
        The batch ID

    Raises:
        BatchResolutionError: If the batch could not be found or created
            within settings.batch_resolve_max_attempts attempts
    """
    name = generate_batch_name(program, intake_year)
    max_attempts = settings.batch_resolve_max_attempts

    for attempt in range(1, max_attempts + 1):
        batch_id = await repository.get_id_by_key(db, program, intake_year)
        if batch_id is not None:
            return batch_id

        try:
            batch_id = await repository.insert_if_absent(
                db,
                program=program,
                intake_year=intake_year,
                name=name,
            )
        except IntegrityError:
            await db.rollback()
            logger.info(
                f"Batch {name} was created concurrently (attempt {attempt}/{max_attempts}), "
                "retrying lookup"
            )
            continue

        if batch_id is not None:
            logger.info(f"Created batch {batch_id} - {name}")
            return batch_id

        logger.info(f"Batch {name} already existed on insert, retrying lookup")

    logger.error(f"Failed to resolve batch {name} after {max_attempts} attempts")
    raise BatchResolutionError(program, intake_year)


# ============================================
# Batch Administration
# ============================================


def _to_batch_response(batch: Batch, student_count: int) -> BatchResponse:
    return BatchResponse(
        id=batch.id,
        name=batch.name,
        program=batch.program,
        intake_year=batch.intake_year,
        description=batch.description,
        is_active=batch.is_active,
        student_count=student_count,
        created_at=batch.created_at,
    )


async def get_batch_or_404(db: AsyncSession, batch_id: UUID) -> Batch:
    """
    Get a batch by ID.

    Raises:
        BatchNotFoundError: If the batch does not exist
    """
    batch = await repository.get_by_id(db, batch_id)
    if not batch:
        raise BatchNotFoundError(batch_id)
    return batch


async def get_batches(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 20,
    program: Program | None = None,
    is_active: bool | None = None,
) -> BatchListResponse:
    """
    List batches with student counts, newest intake first.

    Args:
        db: Database session
        page: 1-based page number
        limit: Page size
        program: Filter by program (optional)
        is_active: Filter by active flag (optional)

    Returns:
        BatchListResponse with batches, total, page and total_pages
    """
    rows, total = await repository.list_batches(
        db,
        program=program,
        is_active=is_active,
        skip=(page - 1) * limit,
        limit=limit,
    )

    return BatchListResponse(
        batches=[_to_batch_response(batch, count) for batch, count in rows],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
    )


async def get_batch_with_stats(db: AsyncSession, batch_id: UUID) -> BatchResponse:
    """Get a batch with its student count."""
    batch = await get_batch_or_404(db, batch_id)
    student_count = await repository.count_students(db, batch_id)
    return _to_batch_response(batch, student_count)


async def update_batch(
    db: AsyncSession,
    batch_id: UUID,
    *,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> BatchResponse:
    """
    Update the editable fields of a batch. None leaves a field unchanged.

    Program and intake year are the batch's identity and cannot change.
    """
    batch = await get_batch_or_404(db, batch_id)

    fields = {
        key: value
        for key, value in (
            ("name", name),
            ("description", description),
            ("is_active", is_active),
        )
        if value is not None
    }
    if fields:
        batch = await repository.update_batch(db, batch, **fields)
        logger.info(f"Updated batch {batch_id}: {sorted(fields)}")

    student_count = await repository.count_students(db, batch_id)
    return _to_batch_response(batch, student_count)


# ============================================
# Form Visibility
# ============================================


async def get_visibility_for_batch(db: AsyncSession, batch_id: UUID | None) -> dict[str, bool]:
    """
    Get the section visibility mapping for a batch.

    Students without a batch, and batches without settings, see every section.
    """
    if batch_id is None:
        return default_visibility()
    return visibility_to_dict(await repository.get_visibility(db, batch_id))


async def get_visibility_settings(db: AsyncSession) -> list[BatchVisibilityItem]:
    """Visibility settings of every active batch, defaults filled in."""
    rows = await repository.list_active_with_counts(db)
    return [
        BatchVisibilityItem(
            id=batch.id,
            name=batch.name,
            program=batch.program,
            intake_year=batch.intake_year,
            student_count=count,
            form_visibility=FormVisibilitySettings(**visibility_to_dict(batch.form_visibility)),
        )
        for batch, count in rows
    ]


async def set_visibility(
    db: AsyncSession,
    batch_id: UUID,
    visibility: Mapping[str, bool | None],
) -> FormVisibilitySettings:
    """
    Create or replace the visibility settings of a batch.

    Sections missing from the mapping (or set to None) become visible.

    Raises:
        BatchNotFoundError: If the batch does not exist
    """
    await get_batch_or_404(db, batch_id)

    values = {}
    for section in ProfileSection:
        value = visibility.get(section.value)
        values[section.value] = True if value is None else bool(value)

    stored = await repository.upsert_visibility(db, batch_id, values)
    logger.info(
        f"Updated form visibility for batch {batch_id}: "
        f"hidden={[key for key, shown in values.items() if not shown]}"
    )
    return FormVisibilitySettings(**visibility_to_dict(stored))
