"""Repository for Notification database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.notification import Notification


async def list_by_user(session: AsyncSession, *, user_id: UUID) -> list[Notification]:
    """List a user's notifications, newest first."""
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    return [notification for notification in result.scalars().all()]


async def create(session: AsyncSession, notification: Notification) -> Notification:
    """Create a new notification."""
    session.add(notification)
    await session.flush()
    return notification
