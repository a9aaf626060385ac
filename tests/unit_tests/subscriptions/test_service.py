"""Unit tests for subscription purchases."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user_subscription import SubscriptionPurchase
from repos import user_subscriptions_repo
from services import quota_service, subscriptions_service
from services.errors import DomainValidationError, NotFoundError

PRO_PLAN = SubscriptionPurchase(
    plan_name="Pro",
    plan_price=999,
    plan_post_limit=10,
    plan_bid_limit=25,
    plan_validity_months=3,
)


def test_add_months_clamps_to_month_end():
    """Test: Adding months keeps the day unless the target month is shorter."""
    assert subscriptions_service.add_months(datetime(2026, 1, 31, 12), 1) == datetime(2026, 2, 28, 12)
    assert subscriptions_service.add_months(datetime(2026, 11, 15), 3) == datetime(2027, 2, 15)
    assert subscriptions_service.add_months(datetime(2028, 1, 31), 1) == datetime(2028, 2, 29)


@pytest.mark.asyncio
async def test_purchase_creates_pending_subscription(db_session: AsyncSession, owner):
    """Test: A purchase is pending until verified and carries a SubId note."""
    now = datetime(2026, 3, 10, 9, 30)

    result = await subscriptions_service.purchase(
        db_session, user_id=owner.id, payload=PRO_PLAN, now=now
    )

    assert result.subscription.subscription_id == 1
    assert result.subscription.payment_status == "pending"
    assert result.subscription.end_date == datetime(2026, 6, 10, 9, 30)
    assert result.note == "SubId_1"
    assert "am=999" in result.upi_uri
    assert result.qr_code.startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_repeat_purchase_reuses_pending_record(db_session: AsyncSession, owner):
    """Test: Buying the same plan again while unpaid returns the existing purchase."""
    first = await subscriptions_service.purchase(db_session, user_id=owner.id, payload=PRO_PLAN)
    second = await subscriptions_service.purchase(db_session, user_id=owner.id, payload=PRO_PLAN)

    assert second.subscription.subscription_id == first.subscription.subscription_id
    assert len(await user_subscriptions_repo.list_by_user(db_session, user_id=owner.id)) == 1


@pytest.mark.asyncio
async def test_submit_transaction_ref_own_subscription_only(db_session: AsyncSession, owner, bidder):
    """Test: The reference can only be stored on one's own purchase."""
    result = await subscriptions_service.purchase(db_session, user_id=owner.id, payload=PRO_PLAN)
    subscription_id = result.subscription.subscription_id

    with pytest.raises(NotFoundError):
        await subscriptions_service.submit_transaction_ref(
            db_session, subscription_id=subscription_id, user_id=bidder.id, transaction_id="UTR9"
        )
    with pytest.raises(DomainValidationError):
        await subscriptions_service.submit_transaction_ref(
            db_session, subscription_id=subscription_id, user_id=owner.id, transaction_id="  "
        )

    stored = await subscriptions_service.submit_transaction_ref(
        db_session, subscription_id=subscription_id, user_id=owner.id, transaction_id="UTR9"
    )
    assert stored.transaction_id == "UTR9"


@pytest.mark.asyncio
async def test_verified_subscription_grants_quota(db_session: AsyncSession, owner):
    """Test: Once an admin verifies the purchase, its limits apply."""
    result = await subscriptions_service.purchase(db_session, user_id=owner.id, payload=PRO_PLAN)
    owner.free_posts_used = 1
    owner.last_free_post_reset = datetime.utcnow()
    await db_session.commit()

    await subscriptions_service.admin_set_status(
        db_session, subscription_id=result.subscription.subscription_id, payment_status="verified"
    )

    decision = await quota_service.check_post_quota(db_session, user_id=owner.id)
    assert decision.allowed is True
    assert decision.limit == 10


@pytest.mark.asyncio
async def test_admin_set_status_unknown_subscription(db_session: AsyncSession):
    """Test: Unknown subscription id."""
    with pytest.raises(NotFoundError):
        await subscriptions_service.admin_set_status(
            db_session, subscription_id=12, payment_status="verified"
        )


@pytest.mark.asyncio
async def test_listing_expires_and_zeroes_both_counters(
    db_session: AsyncSession, owner, subscription_factory
):
    """Test: Listing expires lapsed subscriptions and resets post and bid usage."""
    now = datetime.utcnow()
    await subscription_factory(
        owner, 1, posts_used=2, bids_used=1, end_date=now - timedelta(minutes=1)
    )

    listed = await subscriptions_service.list_user_subscriptions(db_session, user_id=owner.id, now=now)

    assert len(listed) == 1
    assert listed[0].payment_status == "expired"
    assert (listed[0].posts_used, listed[0].bids_used) == (0, 0)
