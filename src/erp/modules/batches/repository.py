"""
Batches Repository

Database operations for batches and their form visibility settings.

Design Principles:
- Single responsibility - only database operations, no business logic
- Batch creation goes through insert_if_absent, which relies on the
  (program, intake_year) unique constraint instead of read-then-write
"""

from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.batches.models import Batch, FormVisibility, Program
from erp.modules.students.models import Student


async def get_by_id(db: AsyncSession, id: UUID) -> Batch | None:
    """Get batch by ID."""
    return await db.get(Batch, id)


async def get_id_by_key(db: AsyncSession, program: Program, intake_year: int) -> UUID | None:
    """Get the ID of the batch for (program, intake_year), if it exists."""
    result = await db.execute(
        select(Batch.id).where(
            Batch.program == program,
            Batch.intake_year == intake_year,
        )
    )
    return result.scalar_one_or_none()


async def insert_if_absent(
    db: AsyncSession,
    *,
    program: Program,
    intake_year: int,
    name: str,
) -> UUID | None:
    """
    Insert a batch unless one already exists for (program, intake_year).

    Uses INSERT ... ON CONFLICT DO NOTHING, so a concurrent insert of the
    same key blocks until the other transaction finishes and then inserts
    nothing.

    Returns:
        The new batch ID, or None if the key already existed
    """
    stmt = (
        pg_insert(Batch)
        .values(
            program=program,
            intake_year=intake_year,
            name=name,
            is_active=True,
        )
        .on_conflict_do_nothing(constraint="uq_batches_program_intake_year")
        .returning(Batch.id)
    )
    result = await db.execute(stmt)
    batch_id = result.scalar_one_or_none()
    await db.commit()
    return batch_id


async def count_students(db: AsyncSession, batch_id: UUID) -> int:
    """Number of students assigned to a batch."""
    result = await db.execute(
        select(func.count()).select_from(Student).where(Student.batch_id == batch_id)
    )
    return result.scalar() or 0


def _student_count_subquery():
    return (
        select(Student.batch_id, func.count(Student.id).label("student_count"))
        .group_by(Student.batch_id)
        .subquery()
    )


async def list_batches(
    db: AsyncSession,
    *,
    program: Program | None = None,
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[tuple[Batch, int]], int]:
    """
    List batches with their student counts, newest intake first.

    Args:
        db: Database session
        program: Filter by program (optional)
        is_active: Filter by active flag (optional)
        skip: Number of records to skip
        limit: Maximum records to return

    Returns:
        Tuple of (list of (batch, student_count), total count matching filters)
    """
    counts = _student_count_subquery()
    query = select(Batch, func.coalesce(counts.c.student_count, 0)).outerjoin(
        counts, counts.c.batch_id == Batch.id
    )

    if program is not None:
        query = query.where(Batch.program == program)
    if is_active is not None:
        query = query.where(Batch.is_active == is_active)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(desc(Batch.intake_year), Batch.program).offset(skip).limit(limit)
    result = await db.execute(query)
    rows = [(row[0], row[1]) for row in result.all()]

    return rows, total


async def list_active_with_counts(db: AsyncSession) -> list[tuple[Batch, int]]:
    """Active batches with student counts, ordered by program then newest intake."""
    counts = _student_count_subquery()
    result = await db.execute(
        select(Batch, func.coalesce(counts.c.student_count, 0))
        .outerjoin(counts, counts.c.batch_id == Batch.id)
        .where(Batch.is_active.is_(True))
        .order_by(Batch.program, desc(Batch.intake_year))
    )
    return [(row[0], row[1]) for row in result.all()]


async def update_batch(db: AsyncSession, batch: Batch, **fields) -> Batch:
    """Apply field updates to a batch and commit."""
    for key, value in fields.items():
        if hasattr(batch, key):
            setattr(batch, key, value)

    await db.commit()
    await db.refresh(batch)
    return batch


async def get_visibility(db: AsyncSession, batch_id: UUID) -> FormVisibility | None:
    """Get the form visibility row for a batch."""
    result = await db.execute(select(FormVisibility).where(FormVisibility.batch_id == batch_id))
    return result.scalar_one_or_none()


async def upsert_visibility(
    db: AsyncSession,
    batch_id: UUID,
    values: dict[str, bool],
) -> FormVisibility:
    """
    Create or replace the form visibility row for a batch.

    Args:
        db: Database session
        batch_id: Batch UUID
        values: Complete section -> visible mapping

    Returns:
        The stored FormVisibility
    """
    stmt = (
        pg_insert(FormVisibility)
        .values(batch_id=batch_id, **values)
        .on_conflict_do_update(
            index_elements=[FormVisibility.batch_id],
            set_={**values, "updated_at": func.now()},
        )
        .returning(FormVisibility)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    visibility = result.scalar_one()
    await db.commit()
    return visibility


async def list_active_ids_by_program(db: AsyncSession, program: Program) -> list[UUID]:
    """IDs of the active batches of a program."""
    result = await db.execute(
        select(Batch.id).where(Batch.program == program, Batch.is_active.is_(True))
    )
    return list(result.scalars().all())
