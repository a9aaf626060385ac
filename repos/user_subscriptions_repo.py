"""Repository for UserSubscription database operations."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user_subscription import UserSubscription


async def list_by_user(session: AsyncSession, *, user_id: UUID) -> list[UserSubscription]:
    """List a user's subscriptions, most recently created first."""
    result = await session.execute(
        select(UserSubscription)
        .where(UserSubscription.user_id == user_id)
        .order_by(UserSubscription.created_at.desc(), UserSubscription.subscription_id.desc())
    )
    return [sub for sub in result.scalars().all()]


async def get_by_subscription_id(
    session: AsyncSession,
    *,
    subscription_id: int,
    user_id: UUID | None = None,
) -> UserSubscription | None:
    """
    Get a subscription by its numeric ID.

    Args:
        session: Database session
        subscription_id: Numeric subscription ID
        user_id: If given, the subscription must belong to this user

    Returns:
        UserSubscription if found, None otherwise
    """
    query = select(UserSubscription).where(UserSubscription.subscription_id == subscription_id)

    if user_id is not None:
        query = query.where(UserSubscription.user_id == user_id)

    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_pending_for_plan(
    session: AsyncSession,
    *,
    user_id: UUID,
    plan_name: str,
) -> UserSubscription | None:
    """An unpaid purchase of the same plan, if the user already started one."""
    result = await session.execute(
        select(UserSubscription)
        .where(
            UserSubscription.user_id == user_id,
            UserSubscription.plan_name == plan_name,
            UserSubscription.payment_status == "pending",
        )
        .order_by(UserSubscription.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create(session: AsyncSession, subscription: UserSubscription) -> UserSubscription:
    """Create a new subscription."""
    session.add(subscription)
    await session.flush()
    await session.refresh(subscription)
    return subscription


async def delete_pending_created_before(session: AsyncSession, *, cutoff: datetime) -> int:
    """
    Delete unpaid purchases created before the cutoff.

    Returns:
        Number of deleted rows
    """
    result = await session.execute(
        delete(UserSubscription).where(
            UserSubscription.payment_status == "pending",
            UserSubscription.created_at < cutoff,
        )
    )
    return result.rowcount or 0
