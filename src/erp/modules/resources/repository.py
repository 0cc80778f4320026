"""
Resources Repository
"""

from uuid import UUID

from sqlalchemy import and_, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.batches.models import Program
from erp.modules.resources.models import Resource, ResourceVisibility


async def create(db: AsyncSession, **fields) -> Resource:
    """Record an uploaded resource."""
    resource = Resource(**fields)
    db.add(resource)
    await db.commit()
    await db.refresh(resource)
    return resource


async def get_by_id(db: AsyncSession, id: UUID) -> Resource | None:
    return await db.get(Resource, id)


async def list_all(db: AsyncSession) -> list[Resource]:
    """Every resource, newest first."""
    result = await db.execute(select(Resource).order_by(desc(Resource.created_at)))
    return list(result.scalars().all())


async def list_visible_to(
    db: AsyncSession, *, program: Program, batch_id: UUID | None
) -> list[Resource]:
    """Resources visible to a student of the given program and batch, newest first."""
    audience = [
        Resource.visibility_type == ResourceVisibility.ALL,
        and_(
            Resource.visibility_type == ResourceVisibility.PROGRAM,
            Resource.program == program,
        ),
    ]
    if batch_id is not None:
        audience.append(
            and_(
                Resource.visibility_type == ResourceVisibility.BATCH,
                Resource.batch_id == batch_id,
            )
        )

    result = await db.execute(
        select(Resource).where(or_(*audience)).order_by(desc(Resource.created_at))
    )
    return list(result.scalars().all())


async def list_by_batch(db: AsyncSession, batch_id: UUID) -> list[Resource]:
    """Resources attached to one batch, newest first."""
    result = await db.execute(
        select(Resource)
        .where(Resource.batch_id == batch_id)
        .order_by(desc(Resource.created_at))
    )
    return list(result.scalars().all())


async def delete(db: AsyncSession, resource: Resource) -> None:
    await db.delete(resource)
    await db.commit()
