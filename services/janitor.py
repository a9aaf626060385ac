"""Periodic cleanup of abandoned subscription purchases."""

import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import AsyncSessionLocal
from repos import user_subscriptions_repo

logger = logging.getLogger(__name__)


async def purge_stale_pending(session: AsyncSession, *, now: datetime | None = None) -> int:
    """
    Delete pending subscription purchases older than STALE_PENDING_DAYS.

    Returns:
        Number of deleted purchases
    """
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=config.settings.STALE_PENDING_DAYS)
    try:
        deleted = await user_subscriptions_repo.delete_pending_created_before(session, cutoff=cutoff)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("Deleted %s stale pending subscriptions older than %s", deleted, cutoff)
    return deleted


async def run_forever(interval_seconds: float | None = None) -> None:
    """Run the cleanup on a fixed interval until cancelled."""
    interval = interval_seconds or config.settings.JANITOR_INTERVAL_SECONDS
    while True:
        try:
            async with AsyncSessionLocal() as session:
                await purge_stale_pending(session)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Cleanup job failed")
        await asyncio.sleep(interval)
