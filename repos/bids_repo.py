"""Repository for Bid database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bid import Bid


async def get_by_bid_id(
    session: AsyncSession,
    *,
    bid_id: int,
    user_id: UUID | None = None,
    project_id: int | None = None,
) -> Bid | None:
    """
    Get a bid by its numeric ID.

    Args:
        session: Database session
        bid_id: Numeric bid ID
        user_id: If given, the bid must belong to this user
        project_id: If given, the bid must belong to this project

    Returns:
        Bid if found, None otherwise
    """
    query = select(Bid).where(Bid.bid_id == bid_id)

    if user_id is not None:
        query = query.where(Bid.user_id == user_id)
    if project_id is not None:
        query = query.where(Bid.project_id == project_id)

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_for_project_and_user(
    session: AsyncSession,
    *,
    project_id: int,
    user_id: UUID,
) -> Bid | None:
    """Get the (single) bid a user placed on a project."""
    result = await session.execute(
        select(Bid).where(Bid.project_id == project_id, Bid.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def list_by_user(session: AsyncSession, *, user_id: UUID) -> list[Bid]:
    """List all bids placed by a user."""
    result = await session.execute(
        select(Bid).where(Bid.user_id == user_id).order_by(Bid.bid_id)
    )
    return [bid for bid in result.scalars().all()]


async def list_by_project(session: AsyncSession, *, project_id: int) -> list[Bid]:
    """List all bids placed on a project."""
    result = await session.execute(
        select(Bid).where(Bid.project_id == project_id).order_by(Bid.bid_id)
    )
    return [bid for bid in result.scalars().all()]


async def create(session: AsyncSession, bid: Bid) -> Bid:
    """Create a new bid."""
    session.add(bid)
    await session.flush()
    await session.refresh(bid)
    return bid
