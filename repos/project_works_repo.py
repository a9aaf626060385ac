"""Repository for ProjectWork database operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.project_work import ProjectWork


async def get_by_work_id(session: AsyncSession, *, work_id: int) -> ProjectWork | None:
    """Get a submission by its numeric work ID."""
    result = await session.execute(select(ProjectWork).where(ProjectWork.work_id == work_id))
    return result.scalar_one_or_none()


async def list_by_project(session: AsyncSession, *, project_id: int) -> list[ProjectWork]:
    """List all submissions for a project, newest first."""
    result = await session.execute(
        select(ProjectWork)
        .where(ProjectWork.project_id == project_id)
        .order_by(ProjectWork.attempt_number.desc(), ProjectWork.work_id.desc())
    )
    return [work for work in result.scalars().all()]


async def count_for_bidder(session: AsyncSession, *, project_id: int, bidder_id: UUID) -> int:
    """Number of submissions a bidder has made for a project."""
    result = await session.execute(
        select(func.count()).select_from(ProjectWork).where(
            ProjectWork.project_id == project_id,
            ProjectWork.bidder_id == bidder_id,
        )
    )
    return result.scalar_one()


async def has_rejected(session: AsyncSession, *, project_id: int, bidder_id: UUID) -> bool:
    """True if any submission by the bidder for the project was rejected."""
    result = await session.execute(
        select(ProjectWork.work_id).where(
            ProjectWork.project_id == project_id,
            ProjectWork.bidder_id == bidder_id,
            ProjectWork.work_status == "rejected",
        )
    )
    return result.first() is not None


async def create(session: AsyncSession, work: ProjectWork) -> ProjectWork:
    """Create a new submission."""
    session.add(work)
    await session.flush()
    await session.refresh(work)
    return work
