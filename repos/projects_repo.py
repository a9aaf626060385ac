"""Repository for Project database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bid import Bid
from models.project import Project


async def get_by_project_id(
    session: AsyncSession,
    *,
    project_id: int,
    status: str | None = None,
) -> Project | None:
    """
    Get a project by its numeric ID.

    Args:
        session: Database session
        project_id: Numeric project ID
        status: If given, only match a project in this status

    Returns:
        Project if found, None otherwise
    """
    query = select(Project).where(Project.project_id == project_id)

    if status is not None:
        query = query.where(Project.status == status)

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def list_by_owner(session: AsyncSession, *, owner_id: UUID) -> list[Project]:
    """List all projects posted by a user, newest first."""
    query = (
        select(Project)
        .where(Project.owner_id == owner_id)
        .order_by(Project.created_at.desc())
    )
    result = await session.execute(query)
    return [project for project in result.scalars().all()]


async def list_open_for_browsing(
    session: AsyncSession,
    *,
    exclude_owner_id: UUID,
    min_budget: float | None = None,
    max_budget: float | None = None,
) -> list[Project]:
    """
    List open projects posted by other users.

    Args:
        session: Database session
        exclude_owner_id: Projects owned by this user are left out
        min_budget: Only projects whose max_budget reaches this value
        max_budget: Only projects whose min_budget stays under this value

    Returns:
        List of projects, newest first
    """
    query = select(Project).where(
        Project.owner_id != exclude_owner_id,
        Project.status == "open",
    )

    if min_budget is not None:
        query = query.where(Project.max_budget >= min_budget)
    if max_budget is not None:
        query = query.where(Project.min_budget <= max_budget)

    result = await session.execute(query.order_by(Project.created_at.desc()))
    return [project for project in result.scalars().all()]


async def list_by_project_ids(session: AsyncSession, *, project_ids: list[int]) -> list[Project]:
    """Fetch several projects by numeric ID."""
    if not project_ids:
        return []
    result = await session.execute(select(Project).where(Project.project_id.in_(project_ids)))
    return [project for project in result.scalars().all()]


async def list_bid_ids(session: AsyncSession, *, project_id: int) -> list[int]:
    """Numeric IDs of the bids placed on a project, in placement order."""
    result = await session.execute(
        select(Bid.bid_id).where(Bid.project_id == project_id).order_by(Bid.bid_id)
    )
    return [bid_id for bid_id in result.scalars().all()]


async def create(session: AsyncSession, project: Project) -> Project:
    """
    Create a new project.

    Args:
        session: Database session
        project: Project instance to create

    Returns:
        Created project
    """
    session.add(project)
    await session.flush()
    await session.refresh(project)
    return project
