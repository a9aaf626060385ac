"""Unit tests for the stale purchase janitor."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from repos import user_subscriptions_repo
from services import janitor


@pytest.mark.asyncio
async def test_purge_deletes_only_stale_pending(db_session: AsyncSession, owner, subscription_factory):
    """Test: Pending purchases older than 15 days go; recent or paid ones stay."""
    now = datetime.utcnow()
    await subscription_factory(owner, 1, payment_status="pending", created_at=now - timedelta(days=16))
    await subscription_factory(owner, 2, payment_status="pending", created_at=now - timedelta(days=14))
    await subscription_factory(owner, 3, payment_status="verified", created_at=now - timedelta(days=40))

    deleted = await janitor.purge_stale_pending(db_session, now=now)

    assert deleted == 1
    remaining = await user_subscriptions_repo.list_by_user(db_session, user_id=owner.id)
    assert sorted(sub.subscription_id for sub in remaining) == [2, 3]


@pytest.mark.asyncio
async def test_purge_with_nothing_stale(db_session: AsyncSession):
    """Test: An empty run deletes nothing."""
    assert await janitor.purge_stale_pending(db_session) == 0
