"""Quota ledger: free-tier and subscription-tier limits for posting and bidding.

Expiry is evaluated lazily whenever a quota is checked: verified subscriptions
past their end date are moved to ``expired`` and the free-tier counter is reset
once the rolling window has elapsed. The normalization is persisted as part of
the check.

Check and consume are not atomic as a pair. Two concurrent requests from the
same user may both pass the check and slightly overrun a limit.
"""

import logging
from datetime import datetime, timedelta
from typing import Literal
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

import config
from models.user_subscription import UserSubscription
from repos import user_subscriptions_repo, users_repo

logger = logging.getLogger(__name__)

QuotaKind = Literal["post", "bid"]

FREE_ACTIONS_PER_WINDOW = 1

# kind -> (subscription usage column, subscription limit column,
#          user free counter column, user last reset column)
_FIELDS = {
    "post": ("posts_used", "plan_post_limit", "free_posts_used", "last_free_post_reset"),
    "bid": ("bids_used", "plan_bid_limit", "free_bids_used", "last_free_bid_reset"),
}

# Both counters are zeroed when a subscription expires
USAGE_FIELDS = ("posts_used", "bids_used")

_DENIED_SUBSCRIPTION = {
    "post": "Post limit reached. {used}/{limit} posts used. Please upgrade your subscription.",
    "bid": "Bid limit reached. {used}/{limit} bids used. Please upgrade your subscription.",
}

_DENIED_FREE = {
    "post": "Free post limit reached. Please purchase a subscription to post more projects.",
    "bid": "Free bid limit reached. Please purchase a subscription to place more bids.",
}


class QuotaDecision(BaseModel):
    """Outcome of a quota check."""

    allowed: bool
    is_free: bool = False
    message: str | None = None
    used: int | None = None
    limit: int | None = None


def _is_active(sub: UserSubscription, now: datetime) -> bool:
    return sub.payment_status == "verified" and sub.end_date >= now


def expire_subscriptions(
    subscriptions: list[UserSubscription],
    *,
    now: datetime,
    reset_fields: tuple[str, ...],
) -> bool:
    """
    Move verified subscriptions past their end date to ``expired``.

    Args:
        subscriptions: Subscriptions to normalize (modified in place)
        now: Reference time
        reset_fields: Usage columns zeroed on expiry

    Returns:
        True if any subscription changed
    """
    changed = False
    for sub in subscriptions:
        if sub.payment_status == "verified" and sub.end_date < now:
            sub.payment_status = "expired"
            for field in reset_fields:
                setattr(sub, field, 0)
            changed = True
            logger.info("Subscription %s expired", sub.subscription_id)
    return changed


async def _check(
    session: AsyncSession,
    *,
    user_id: UUID,
    kind: QuotaKind,
    now: datetime | None,
) -> QuotaDecision:
    used_field, limit_field, free_field, reset_field = _FIELDS[kind]
    now = now or datetime.utcnow()

    subscriptions = await user_subscriptions_repo.list_by_user(session, user_id=user_id)
    changed = expire_subscriptions(subscriptions, now=now, reset_fields=USAGE_FIELDS)

    active = [sub for sub in subscriptions if _is_active(sub, now)]
    total_used = sum(getattr(sub, used_field) or 0 for sub in active)
    total_limit = sum(getattr(sub, limit_field) or 0 for sub in active)

    if active and total_limit > 0:
        if changed:
            await session.commit()
        if total_used >= total_limit:
            return QuotaDecision(
                allowed=False,
                message=_DENIED_SUBSCRIPTION[kind].format(used=total_used, limit=total_limit),
                used=total_used,
                limit=total_limit,
            )
        return QuotaDecision(allowed=True, is_free=False, used=total_used, limit=total_limit)

    user = await users_repo.get_by_id(session, user_id=user_id)
    if not user:
        if changed:
            await session.commit()
        return QuotaDecision(allowed=False, message="User not found.")

    last_reset = getattr(user, reset_field)
    window = timedelta(days=config.settings.FREE_QUOTA_WINDOW_DAYS)
    if last_reset is not None and now - last_reset >= window:
        setattr(user, free_field, 0)
        setattr(user, reset_field, now)
        changed = True
        logger.info("Reset free %s quota for user %s", kind, user_id)

    if changed:
        await session.commit()

    free_used = getattr(user, free_field) or 0
    if free_used >= FREE_ACTIONS_PER_WINDOW:
        return QuotaDecision(
            allowed=False,
            message=_DENIED_FREE[kind],
            used=free_used,
            limit=FREE_ACTIONS_PER_WINDOW,
        )
    return QuotaDecision(
        allowed=True,
        is_free=True,
        used=free_used,
        limit=FREE_ACTIONS_PER_WINDOW,
    )


async def _consume(
    session: AsyncSession,
    *,
    user_id: UUID,
    kind: QuotaKind,
    decision: QuotaDecision,
    now: datetime | None,
) -> None:
    used_field, _, free_field, reset_field = _FIELDS[kind]
    now = now or datetime.utcnow()

    if decision.is_free:
        user = await users_repo.get_by_id(session, user_id=user_id)
        if user:
            setattr(user, free_field, (getattr(user, free_field) or 0) + 1)
            setattr(user, reset_field, now)
    else:
        # Stacked subscriptions: charge the most recently created active one
        subscriptions = await user_subscriptions_repo.list_by_user(session, user_id=user_id)
        active = [sub for sub in subscriptions if _is_active(sub, now)]
        if active:
            sub = active[0]
            setattr(sub, used_field, (getattr(sub, used_field) or 0) + 1)

    await session.flush()


async def check_post_quota(
    session: AsyncSession,
    *,
    user_id: UUID,
    now: datetime | None = None,
) -> QuotaDecision:
    """
    Check whether a user may post another project.

    Args:
        session: Database session
        user_id: User to check
        now: Reference time (defaults to utcnow)

    Returns:
        QuotaDecision
    """
    return await _check(session, user_id=user_id, kind="post", now=now)


async def check_bid_quota(
    session: AsyncSession,
    *,
    user_id: UUID,
    now: datetime | None = None,
) -> QuotaDecision:
    """
    Check whether a user may place another bid.

    Args:
        session: Database session
        user_id: User to check
        now: Reference time (defaults to utcnow)

    Returns:
        QuotaDecision
    """
    return await _check(session, user_id=user_id, kind="bid", now=now)


async def consume_post(
    session: AsyncSession,
    *,
    user_id: UUID,
    decision: QuotaDecision,
    now: datetime | None = None,
) -> None:
    """Record one project post against the tier that allowed it. Caller commits."""
    await _consume(session, user_id=user_id, kind="post", decision=decision, now=now)


async def consume_bid(
    session: AsyncSession,
    *,
    user_id: UUID,
    decision: QuotaDecision,
    now: datetime | None = None,
) -> None:
    """Record one bid against the tier that allowed it. Caller commits."""
    await _consume(session, user_id=user_id, kind="bid", decision=decision, now=now)
