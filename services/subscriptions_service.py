"""Service layer for subscription purchases."""

import calendar
import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.user_subscription import (
    SubscriptionPurchase,
    SubscriptionPurchaseResponse,
    UserSubscription,
    UserSubscriptionResponse,
)
from repos import user_subscriptions_repo
from services import payment_presentation, quota_service, sequence_service
from services.errors import DomainValidationError, NotFoundError

logger = logging.getLogger(__name__)


def add_months(value: datetime, months: int) -> datetime:
    """Shift a datetime by whole calendar months, clamping to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def subscription_note(subscription_id: int) -> str:
    """Reference note the payer puts on the UPI transfer."""
    return f"SubId_{subscription_id}"


async def purchase(
    session: AsyncSession,
    *,
    user_id: UUID,
    payload: SubscriptionPurchase,
    now: datetime | None = None,
) -> SubscriptionPurchaseResponse:
    """
    Start a plan purchase and return the payment collection instruction.

    An existing unpaid purchase of the same plan is reused instead of creating
    another pending record.

    Args:
        session: Database session
        user_id: Purchasing user
        payload: Plan terms
        now: Reference time (defaults to utcnow)

    Returns:
        SubscriptionPurchaseResponse
    """
    now = now or datetime.utcnow()

    subscription = await user_subscriptions_repo.get_pending_for_plan(
        session,
        user_id=user_id,
        plan_name=payload.plan_name,
    )
    if subscription:
        logger.info(
            "Reusing pending subscription %s for user %s",
            subscription.subscription_id,
            user_id,
        )
    else:
        try:
            subscription_id = await sequence_service.next_id(
                session,
                sequence_service.SUBSCRIPTION_ID,
            )
            subscription = await user_subscriptions_repo.create(
                session,
                UserSubscription(
                    subscription_id=subscription_id,
                    user_id=user_id,
                    plan_name=payload.plan_name,
                    plan_price=payload.plan_price,
                    plan_post_limit=payload.plan_post_limit,
                    plan_bid_limit=payload.plan_bid_limit,
                    plan_validity_months=payload.plan_validity_months,
                    payment_status="pending",
                    posts_used=0,
                    bids_used=0,
                    end_date=add_months(now, payload.plan_validity_months),
                    created_at=now,
                ),
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        logger.info(
            "Subscription %s (%s) started by user %s",
            subscription.subscription_id,
            subscription.plan_name,
            user_id,
        )

    note = subscription_note(subscription.subscription_id)
    return SubscriptionPurchaseResponse(
        subscription=UserSubscriptionResponse.model_validate(subscription),
        **payment_presentation.build_payment_artifact(subscription.plan_price, note),
    )


async def submit_transaction_ref(
    session: AsyncSession,
    *,
    subscription_id: int,
    user_id: UUID,
    transaction_id: str,
) -> UserSubscription:
    """
    Store the buyer's UPI transaction reference.

    Raises:
        DomainValidationError: empty reference
        NotFoundError: no such subscription owned by the user
    """
    transaction_id = (transaction_id or "").strip()
    if not transaction_id:
        raise DomainValidationError("Transaction ID is required")

    subscription = await user_subscriptions_repo.get_by_subscription_id(
        session,
        subscription_id=subscription_id,
        user_id=user_id,
    )
    if not subscription:
        raise NotFoundError("User subscription not found or unauthorized")

    subscription.transaction_id = transaction_id
    await session.commit()
    await session.refresh(subscription)
    return subscription


async def admin_set_status(
    session: AsyncSession,
    *,
    subscription_id: int,
    payment_status: str,
) -> UserSubscription:
    """
    Set a subscription's payment status (administrators only; enforced by the caller).

    Raises:
        NotFoundError: subscription not found
    """
    subscription = await user_subscriptions_repo.get_by_subscription_id(
        session,
        subscription_id=subscription_id,
    )
    if not subscription:
        raise NotFoundError("User subscription not found")

    previous = subscription.payment_status
    subscription.payment_status = payment_status
    await session.commit()
    await session.refresh(subscription)
    logger.info(
        "Subscription %s moved from %s to %s",
        subscription_id,
        previous,
        payment_status,
    )
    return subscription


async def list_user_subscriptions(
    session: AsyncSession,
    *,
    user_id: UUID,
    now: datetime | None = None,
) -> list[UserSubscription]:
    """
    List a user's subscriptions, expiring lapsed ones first.

    Expired subscriptions have both usage counters reset.
    """
    now = now or datetime.utcnow()
    subscriptions = await user_subscriptions_repo.list_by_user(session, user_id=user_id)
    if quota_service.expire_subscriptions(
        subscriptions,
        now=now,
        reset_fields=quota_service.USAGE_FIELDS,
    ):
        await session.commit()
    return subscriptions
