"""Best-effort in-app notifications.

Notifications are written after the triggering transition has been committed.
A failure here is logged and swallowed so the transition is never undone.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.notification import Notification
from repos import notifications_repo

logger = logging.getLogger(__name__)


async def notify(
    session: AsyncSession,
    *,
    recipient_id: UUID,
    kind: str,
    project_id: int,
    message: str,
) -> bool:
    """
    Record a notification for a user.

    Args:
        session: Database session (its previous transaction must be committed)
        recipient_id: User to notify
        kind: Notification type
        project_id: Related project
        message: Human-readable text

    Returns:
        True if the notification was stored, False if delivery failed
    """
    try:
        await notifications_repo.create(
            session,
            Notification(
                user_id=recipient_id,
                type=kind,
                project_id=project_id,
                message=message,
            ),
        )
        await session.commit()
        return True
    except Exception:
        await session.rollback()
        logger.exception(
            "Failed to deliver %s notification to %s for project %s",
            kind,
            recipient_id,
            project_id,
        )
        return False


async def list_notifications(session: AsyncSession, *, user_id: UUID) -> list[Notification]:
    """List a user's notifications, newest first."""
    return await notifications_repo.list_by_user(session, user_id=user_id)
