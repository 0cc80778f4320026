"""
Students Repository

Database operations for student profiles and their uploaded documents.

Design Principles:
- Single responsibility - only database operations, no business logic
- Profile field updates arrive as plain column -> value mappings
"""

from typing import Any
from uuid import UUID

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp.modules.batches.models import Program
from erp.modules.students.models import Student, StudentDocument
from erp.modules.students.schemas import OnboardingRequest
from erp.modules.users.models import User


async def get_by_id(db: AsyncSession, id: UUID) -> Student | None:
    """Get student by ID."""
    return await db.get(Student, id)


async def get_by_user_id(db: AsyncSession, user_id: UUID) -> Student | None:
    """Get the student profile of a user."""
    result = await db.execute(select(Student).where(Student.user_id == user_id))
    return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    *,
    user_id: UUID,
    batch_id: UUID,
    data: OnboardingRequest,
) -> Student:
    """Create a student profile from an onboarding request."""
    student = Student(
        user_id=user_id,
        batch_id=batch_id,
        has_completed_onboarding=True,
        **data.model_dump(),
    )

    db.add(student)
    await db.commit()
    await db.refresh(student)

    return student


async def update_fields(db: AsyncSession, student: Student, values: dict[str, Any]) -> Student:
    """Apply column updates to a student and commit."""
    for key, value in values.items():
        if hasattr(student, key):
            setattr(student, key, value)

    await db.commit()
    await db.refresh(student)
    return student


async def set_batch(db: AsyncSession, student: Student, batch_id: UUID | None) -> Student:
    """Assign a student to a batch, or unassign with None."""
    student.batch_id = batch_id
    await db.commit()
    await db.refresh(student)
    return student


async def list_for_admin(
    db: AsyncSession,
    *,
    batch_id: UUID | None = None,
    program: Program | None = None,
    intake_year: int | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Student], int]:
    """
    List students with filters, newest first.

    Args:
        db: Database session
        batch_id: Filter by batch (optional)
        program: Filter by program (optional)
        intake_year: Filter by intake year (optional)
        search: Case-insensitive match on first name, last name or email
        skip: Number of records to skip
        limit: Maximum records to return

    Returns:
        Tuple of (students, total count matching filters)
    """
    query = select(Student).join(User, User.id == Student.user_id)

    if batch_id is not None:
        query = query.where(Student.batch_id == batch_id)
    if program is not None:
        query = query.where(Student.program == program)
    if intake_year is not None:
        query = query.where(Student.intake_year == intake_year)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(desc(Student.created_at)).offset(skip).limit(limit)
    result = await db.execute(query)

    return list(result.scalars().all()), total


async def get_recipient_emails(
    db: AsyncSession,
    *,
    batch_id: UUID | None = None,
    program: Program | None = None,
) -> list[str]:
    """
    Emails of active student accounts, optionally narrowed to a batch or program.

    Returns:
        Distinct email addresses, sorted
    """
    query = (
        select(User.email)
        .join(Student, Student.user_id == User.id)
        .where(User.is_active.is_(True))
    )
    if batch_id is not None:
        query = query.where(Student.batch_id == batch_id)
    if program is not None:
        query = query.where(Student.program == program)

    result = await db.execute(query.distinct().order_by(User.email))
    return list(result.scalars().all())


# ============================================
# Documents
# ============================================


async def create_document(
    db: AsyncSession,
    *,
    student_id: UUID,
    doc_type: str,
    file_name: str,
    stored_path: str,
    file_size: int,
    mime_type: str,
) -> StudentDocument:
    """Record an uploaded document."""
    document = StudentDocument(
        student_id=student_id,
        type=doc_type,
        file_name=file_name,
        stored_path=stored_path,
        file_size=file_size,
        mime_type=mime_type,
    )

    db.add(document)
    await db.commit()
    await db.refresh(document)

    return document


async def list_documents(db: AsyncSession, student_id: UUID) -> list[StudentDocument]:
    """Documents of a student, oldest first."""
    result = await db.execute(
        select(StudentDocument)
        .where(StudentDocument.student_id == student_id)
        .order_by(StudentDocument.uploaded_at)
    )
    return list(result.scalars().all())


async def get_document(
    db: AsyncSession, student_id: UUID, document_id: UUID
) -> StudentDocument | None:
    """Get a document, scoped to its owner."""
    result = await db.execute(
        select(StudentDocument).where(
            StudentDocument.id == document_id,
            StudentDocument.student_id == student_id,
        )
    )
    return result.scalar_one_or_none()


async def delete_document(db: AsyncSession, document: StudentDocument) -> None:
    """Delete a document record."""
    await db.delete(document)
    await db.commit()
