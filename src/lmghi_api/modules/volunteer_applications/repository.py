"""
Volunteer Applications Repository

Database operations for volunteer applications. Only data access lives
here; validation and error translation belong to the service layer.

Design Principles:
- All queries are parameterized (no SQL injection)
- Async operations for non-blocking I/O
- Errors from the driver propagate unchanged to the caller
"""

import uuid
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ApplicationStatus, VolunteerApplication
from .schemas import ValidatedApplication


async def create(db: AsyncSession, data: ValidatedApplication) -> VolunteerApplication:
    """
    Insert a new volunteer application with the default status.

    The id is assigned here and the row is not refreshed, so nothing can
    fail once the commit has gone through.
    """
    new_application = VolunteerApplication(
        id=uuid.uuid4(),
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
        role_interest=data.role_interest,
        country=data.country,
        city=data.city,
        availability=data.availability,
        motivation=data.motivation,
        cv_url=data.cv_url,
        status=ApplicationStatus.PENDING,
    )

    db.add(new_application)
    await db.commit()

    return new_application


async def get_by_id(db: AsyncSession, id: UUID) -> VolunteerApplication | None:
    """Get application by ID."""
    return await db.get(VolunteerApplication, id)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def list_applications(
    db: AsyncSession,
    *,
    status: ApplicationStatus | None = None,
    search: str | None = None,
    limit: int = 200,
) -> list[VolunteerApplication]:
    """
    List applications for the admin review screen, newest first.

    Args:
        db: Database session
        status: Only return applications in this status (all when None)
        search: Case-insensitive substring matched against name OR email
        limit: Maximum rows to return (already capped by the caller)

    Returns:
        Applications ordered by created_at descending
    """
    query = select(VolunteerApplication)

    if status:
        query = query.where(VolunteerApplication.status == status)

    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.where(
            or_(
                VolunteerApplication.full_name.ilike(pattern, escape="\\"),
                VolunteerApplication.email.ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(VolunteerApplication.created_at.desc()).limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def update_status(
    db: AsyncSession,
    id: UUID,
    status: ApplicationStatus,
) -> VolunteerApplication | None:
    """
    Set the status of a single application.

    Concurrent updates are last-write-wins.

    Returns:
        The updated application, or None if no row has this ID
    """
    application = await get_by_id(db, id)
    if not application:
        return None

    application.status = status

    await db.commit()
    await db.refresh(application)

    return application
