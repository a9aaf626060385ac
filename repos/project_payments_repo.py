"""Repository for ProjectPayment database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.project_payment import ProjectPayment


async def get_by_payment_id(session: AsyncSession, *, payment_id: int) -> ProjectPayment | None:
    """Get a payment by its numeric ID."""
    result = await session.execute(
        select(ProjectPayment).where(ProjectPayment.payment_id == payment_id)
    )
    return result.scalar_one_or_none()


async def get_by_project_id(
    session: AsyncSession,
    *,
    project_id: int,
    bidder_id: UUID | None = None,
) -> ProjectPayment | None:
    """
    Get the escrow payment of a project.

    Args:
        session: Database session
        project_id: Numeric project ID
        bidder_id: If given, the payment must be owed to this bidder

    Returns:
        ProjectPayment if found, None otherwise
    """
    query = select(ProjectPayment).where(ProjectPayment.project_id == project_id)

    if bidder_id is not None:
        query = query.where(ProjectPayment.bidder_id == bidder_id)

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def exists_with_status(session: AsyncSession, *, project_id: int, status: str) -> bool:
    """True if the project's payment is in the given status."""
    result = await session.execute(
        select(ProjectPayment.payment_id).where(
            ProjectPayment.project_id == project_id,
            ProjectPayment.payment_status == status,
        )
    )
    return result.first() is not None


async def list_by_status(session: AsyncSession, *, status: str) -> list[ProjectPayment]:
    """List payments in a status, oldest first."""
    result = await session.execute(
        select(ProjectPayment)
        .where(ProjectPayment.payment_status == status)
        .order_by(ProjectPayment.created_at)
    )
    return [payment for payment in result.scalars().all()]


async def list_verified_for_participant(
    session: AsyncSession,
    *,
    user_id: UUID,
) -> list[ProjectPayment]:
    """Verified payments where the user is either the owner or the bidder."""
    result = await session.execute(
        select(ProjectPayment).where(
            ProjectPayment.payment_status == "verified",
            (ProjectPayment.owner_id == user_id) | (ProjectPayment.bidder_id == user_id),
        )
    )
    return [payment for payment in result.scalars().all()]


async def create(session: AsyncSession, payment: ProjectPayment) -> ProjectPayment:
    """Create a new payment."""
    session.add(payment)
    await session.flush()
    await session.refresh(payment)
    return payment
