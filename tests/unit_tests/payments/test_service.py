"""Unit tests for the payment verification gate."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from repos import notifications_repo, project_payments_repo
from services import payment_service
from services.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError


@pytest.mark.asyncio
async def test_project_locked_until_verified(db_session: AsyncSession, assigned_project):
    """Test: Finalization alone does not unlock the project."""
    assert await payment_service.is_unlocked(db_session, project_id=1) is False

    await payment_service.admin_verify(
        db_session, payment_id=assigned_project.payment.payment_id, status="verified"
    )

    assert await payment_service.is_unlocked(db_session, project_id=1) is True


@pytest.mark.asyncio
async def test_verify_stamps_time_and_notifies_bidder(db_session: AsyncSession, assigned_project, bidder):
    """Test: Verification records verified_at and leaves a notification for the bidder."""
    payment = await payment_service.admin_verify(
        db_session, payment_id=assigned_project.payment.payment_id, status="verified"
    )

    assert payment.payment_status == "verified"
    assert payment.verified_at is not None
    notifications = await notifications_repo.list_by_user(db_session, user_id=bidder.id)
    assert [n.type for n in notifications] == ["payment_verified"]
    assert "(Project ID: 1)" in notifications[0].message


@pytest.mark.asyncio
async def test_verify_twice_conflicts(db_session: AsyncSession, unlocked_project):
    """Test: Re-applying the current status is a conflict."""
    with pytest.raises(ConflictError):
        await payment_service.admin_verify(
            db_session, payment_id=unlocked_project.payment.payment_id, status="verified"
        )


@pytest.mark.asyncio
async def test_status_never_moves_backwards(db_session: AsyncSession, unlocked_project):
    """Test: verified cannot go back to pending; released cannot go back to verified."""
    payment_id = unlocked_project.payment.payment_id

    with pytest.raises(InvalidStateError):
        await payment_service.admin_verify(db_session, payment_id=payment_id, status="pending")

    await payment_service.admin_verify(db_session, payment_id=payment_id, status="released")
    with pytest.raises(InvalidStateError):
        await payment_service.admin_verify(db_session, payment_id=payment_id, status="verified")


@pytest.mark.asyncio
async def test_pending_payment_cannot_skip_verification(db_session: AsyncSession, assigned_project):
    """Test: A pending payment cannot be released before it is verified."""
    payment_id = assigned_project.payment.payment_id

    with pytest.raises(InvalidStateError) as exc_info:
        await payment_service.admin_verify(db_session, payment_id=payment_id, status="released")

    assert exc_info.value.message == "Cannot move payment from pending to released without verification"
    payment = await project_payments_repo.get_by_payment_id(db_session, payment_id=payment_id)
    assert payment.payment_status == "pending"
    assert payment.verified_at is None
    assert await payment_service.is_unlocked(db_session, project_id=1) is False


@pytest.mark.asyncio
async def test_verify_unknown_payment_not_found(db_session: AsyncSession):
    """Test: Unknown payment id."""
    with pytest.raises(NotFoundError):
        await payment_service.admin_verify(db_session, payment_id=999, status="verified")


@pytest.mark.asyncio
async def test_notification_failure_keeps_verification(
    db_session: AsyncSession, assigned_project, monkeypatch
):
    """Test: A failing notification write does not undo the verification."""

    async def broken_create(session, notification):
        raise RuntimeError("notification store down")

    monkeypatch.setattr(notifications_repo, "create", broken_create)

    payment = await payment_service.admin_verify(
        db_session, payment_id=assigned_project.payment.payment_id, status="verified"
    )

    assert payment.payment_status == "verified"
    stored = await project_payments_repo.get_by_payment_id(db_session, payment_id=payment.payment_id)
    assert stored.payment_status == "verified"


@pytest.mark.asyncio
async def test_submit_transaction_ref_owner_only(db_session: AsyncSession, assigned_project, owner, bidder):
    """Test: Only the paying owner records the reference; status stays pending."""
    payment_id = assigned_project.payment.payment_id

    with pytest.raises(ForbiddenError):
        await payment_service.submit_transaction_ref(
            db_session, payment_id=payment_id, owner_id=bidder.id, transaction_id="UTR123"
        )

    payment = await payment_service.submit_transaction_ref(
        db_session, payment_id=payment_id, owner_id=owner.id, transaction_id=" UTR123 "
    )

    assert payment.transaction_id == "UTR123"
    assert payment.payment_status == "pending"


@pytest.mark.asyncio
async def test_get_project_payment_visibility(
    db_session: AsyncSession, assigned_project, owner, bidder, other_bidder, admin
):
    """Test: Owner, bidder and admins see the payment with its artifact; others do not."""
    for user_id, is_admin in ((owner.id, False), (bidder.id, False), (admin.id, True)):
        payment = await payment_service.get_project_payment(
            db_session, project_id=1, user_id=user_id, is_admin=is_admin
        )
        assert payment.note == f"ProjId_1_PayId_{assigned_project.payment.payment_id}"
        assert payment.qr_code.startswith("data:image/png;base64,")

    with pytest.raises(ForbiddenError):
        await payment_service.get_project_payment(db_session, project_id=1, user_id=other_bidder.id)


@pytest.mark.asyncio
async def test_list_pending_payments(db_session: AsyncSession, assigned_project):
    """Test: Pending payments are listed until verified."""
    pending = await payment_service.list_pending_payments(db_session)
    assert [p.payment_id for p in pending] == [assigned_project.payment.payment_id]

    await payment_service.admin_verify(
        db_session, payment_id=assigned_project.payment.payment_id, status="verified"
    )

    assert await payment_service.list_pending_payments(db_session) == []
