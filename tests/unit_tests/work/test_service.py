"""Unit tests for the work submission and review state machine."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from repos import notifications_repo, project_payments_repo, projects_repo
from services import work_service
from services.errors import ForbiddenError, InvalidStateError, NotFoundError


async def _submit(db_session, bidder, name="mixdown.wav"):
    return await work_service.submit_work(
        db_session, project_id=1, bidder_id=bidder.id, file_ref=f"uploads/project_work/1/{name}"
    )


async def _submit_until_attempt(db_session, owner, bidder, attempts):
    """Submit `attempts` times, asking for improvements after every attempt but the last."""
    work = await _submit(db_session, bidder, "v1.wav")
    for attempt in range(2, attempts + 1):
        await work_service.comment_on_work(
            db_session,
            work_id=work.work_id,
            owner_id=owner.id,
            comment="More low end",
            work_status="needs_improvement",
        )
        work = await _submit(db_session, bidder, f"v{attempt}.wav")
    return work


@pytest.mark.asyncio
async def test_submit_before_payment_verified_forbidden(db_session: AsyncSession, assigned_project, bidder):
    """Test: Work cannot be submitted while the escrow payment is pending."""
    with pytest.raises(ForbiddenError):
        await _submit(db_session, bidder)


@pytest.mark.asyncio
async def test_submit_by_non_assigned_user_forbidden(db_session: AsyncSession, unlocked_project, other_bidder):
    """Test: Only the assigned bidder submits work."""
    with pytest.raises(ForbiddenError):
        await _submit(db_session, other_bidder)


@pytest.mark.asyncio
async def test_submit_unknown_project_not_found(db_session: AsyncSession, bidder):
    """Test: Unknown project."""
    with pytest.raises(NotFoundError):
        await _submit(db_session, bidder)


@pytest.mark.asyncio
async def test_submit_creates_pending_attempt(db_session: AsyncSession, unlocked_project, owner, bidder):
    """Test: A submission is pending, numbered, and moves the project to work_submitted."""
    work = await _submit(db_session, bidder)

    assert work.attempt_number == 1
    assert work.work_status == "pending"
    assert work.dispute_status == "none"
    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "work_submitted"
    assert project.work_url == work.file_url

    notifications = await notifications_repo.list_by_user(db_session, user_id=owner.id)
    assert [n.type for n in notifications] == ["work_submitted"]


@pytest.mark.asyncio
async def test_accept_completes_project(db_session: AsyncSession, unlocked_project, owner, bidder):
    """Test: Accepting a pending submission completes the project."""
    work = await _submit(db_session, bidder)

    accepted = await work_service.accept_work(db_session, work_id=work.work_id, owner_id=owner.id)

    assert accepted.work_status == "accepted"
    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "completed"


@pytest.mark.asyncio
async def test_accept_twice_invalid_state(db_session: AsyncSession, unlocked_project, owner, bidder):
    """Test: Only pending submissions can be accepted."""
    work = await _submit(db_session, bidder)
    await work_service.accept_work(db_session, work_id=work.work_id, owner_id=owner.id)

    with pytest.raises(InvalidStateError):
        await work_service.accept_work(db_session, work_id=work.work_id, owner_id=owner.id)


@pytest.mark.asyncio
async def test_accept_by_non_owner_forbidden(db_session: AsyncSession, unlocked_project, bidder):
    """Test: The bidder cannot accept their own work."""
    work = await _submit(db_session, bidder)

    with pytest.raises(ForbiddenError):
        await work_service.accept_work(db_session, work_id=work.work_id, owner_id=bidder.id)


@pytest.mark.asyncio
async def test_reject_before_fifth_attempt_invalid_state(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: A first attempt cannot be rejected."""
    work = await _submit(db_session, bidder)

    with pytest.raises(InvalidStateError) as exc_info:
        await work_service.reject_work(db_session, work_id=work.work_id, owner_id=owner.id)

    assert exc_info.value.message == "Cannot reject work: Less than 5 attempts"


@pytest.mark.asyncio
async def test_attempts_count_up_and_fifth_can_be_rejected(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: After four rounds of feedback the fifth attempt can be rejected."""
    work = await _submit_until_attempt(db_session, owner, bidder, 5)
    assert work.attempt_number == 5

    rejected = await work_service.reject_work(db_session, work_id=work.work_id, owner_id=owner.id)

    assert rejected.work_status == "rejected"
    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "rejected"

    # A rejected bidder must dispute instead of resubmitting
    with pytest.raises(ForbiddenError):
        await _submit(db_session, bidder, "v6.wav")


@pytest.mark.asyncio
async def test_stale_attempt_cannot_complete_rejected_project(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: Accepting an older pending attempt after a rejection leaves the project rejected."""
    stale = await _submit_until_attempt(db_session, owner, bidder, 4)
    latest = await _submit(db_session, bidder, "v5.wav")
    await work_service.reject_work(db_session, work_id=latest.work_id, owner_id=owner.id)

    with pytest.raises(InvalidStateError) as exc_info:
        await work_service.accept_work(db_session, work_id=stale.work_id, owner_id=owner.id)

    assert exc_info.value.message == "Project is already closed"
    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "rejected"


@pytest.mark.asyncio
async def test_stale_attempt_cannot_reject_completed_project(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: Rejecting an older pending attempt after an acceptance leaves the project completed."""
    stale = await _submit_until_attempt(db_session, owner, bidder, 5)
    latest = await _submit(db_session, bidder, "v6.wav")
    await work_service.accept_work(db_session, work_id=latest.work_id, owner_id=owner.id)

    with pytest.raises(InvalidStateError):
        await work_service.reject_work(db_session, work_id=stale.work_id, owner_id=owner.id)

    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "completed"
    works = await work_service.list_project_work(db_session, project_id=1, user_id=owner.id)
    assert [w.work_status for w in works] == ["accepted", "pending"] + ["needs_improvement"] * 4


@pytest.mark.asyncio
async def test_ensure_can_submit_checks_without_writing(
    db_session: AsyncSession, unlocked_project, bidder, other_bidder
):
    """Test: The pre-upload check refuses outsiders and creates no submission."""
    with pytest.raises(ForbiddenError):
        await work_service.ensure_can_submit(db_session, project_id=1, bidder_id=other_bidder.id)

    project = await work_service.ensure_can_submit(db_session, project_id=1, bidder_id=bidder.id)

    assert project.project_id == 1
    assert project.status == "assigned"
    assert await work_service.list_project_work(db_session, project_id=1, user_id=bidder.id) == []


@pytest.mark.asyncio
async def test_download_limited_to_owner_and_bidder(
    db_session: AsyncSession, unlocked_project, owner, bidder, other_bidder
):
    """Test: Owner and submitting bidder may fetch a submission's file; nobody else."""
    work = await _submit(db_session, bidder)

    for user in (owner, bidder):
        fetched = await work_service.get_work_for_download(
            db_session, work_id=work.work_id, user_id=user.id
        )
        assert fetched.file_url == work.file_url

    with pytest.raises(ForbiddenError):
        await work_service.get_work_for_download(
            db_session, work_id=work.work_id, user_id=other_bidder.id
        )
    with pytest.raises(NotFoundError):
        await work_service.get_work_for_download(db_session, work_id=999, user_id=owner.id)


@pytest.mark.asyncio
async def test_comment_grades_only_pending_work(db_session: AsyncSession, unlocked_project, owner, bidder):
    """Test: Grading a graded submission is refused; a plain comment is still stored."""
    work = await _submit(db_session, bidder)
    await work_service.comment_on_work(
        db_session, work_id=work.work_id, owner_id=owner.id, comment="Great", work_status="welldone"
    )

    with pytest.raises(InvalidStateError):
        await work_service.comment_on_work(
            db_session,
            work_id=work.work_id,
            owner_id=owner.id,
            comment="Actually no",
            work_status="needs_improvement",
        )

    commented = await work_service.comment_on_work(
        db_session, work_id=work.work_id, owner_id=owner.id, comment="Thanks!"
    )
    assert commented.work_status == "welldone"
    assert commented.owner_comment == "Thanks!"


@pytest.mark.asyncio
async def test_list_project_work_latest_first(
    db_session: AsyncSession, unlocked_project, owner, bidder, other_bidder
):
    """Test: Owner and assigned bidder list submissions, latest attempt first."""
    await _submit_until_attempt(db_session, owner, bidder, 2)

    works = await work_service.list_project_work(db_session, project_id=1, user_id=owner.id)
    assert [w.attempt_number for w in works] == [2, 1]

    with pytest.raises(ForbiddenError):
        await work_service.list_project_work(db_session, project_id=1, user_id=other_bidder.id)


@pytest.mark.asyncio
async def test_dispute_requires_rejected_work(db_session: AsyncSession, unlocked_project, bidder):
    """Test: Pending work cannot be disputed."""
    work = await _submit(db_session, bidder)

    with pytest.raises(InvalidStateError):
        await work_service.raise_dispute(
            db_session, work_id=work.work_id, bidder_id=bidder.id, reason="Unfair"
        )


@pytest.mark.asyncio
async def test_accepted_dispute_completes_and_releases(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: Rejected -> disputed -> resolved in the bidder's favour releases the payment."""
    work = await _submit_until_attempt(db_session, owner, bidder, 5)
    await work_service.reject_work(db_session, work_id=work.work_id, owner_id=owner.id)

    with pytest.raises(ForbiddenError):
        await work_service.raise_dispute(
            db_session, work_id=work.work_id, bidder_id=owner.id, reason="Not mine"
        )

    disputed = await work_service.raise_dispute(
        db_session, work_id=work.work_id, bidder_id=bidder.id, reason="Brief was followed"
    )
    assert disputed.dispute_status == "raised"

    with pytest.raises(InvalidStateError):
        await work_service.raise_dispute(
            db_session, work_id=work.work_id, bidder_id=bidder.id, reason="Again"
        )

    resolved = await work_service.resolve_dispute(
        db_session, work_id=work.work_id, decision="accepted", admin_reason="Deliverables match brief"
    )

    assert resolved.dispute_status == "resolved_accepted"
    assert resolved.work_status == "accepted"
    assert resolved.admin_decision == "Deliverables match brief"
    project = await projects_repo.get_by_project_id(db_session, project_id=1)
    assert project.status == "completed"
    payment = await project_payments_repo.get_by_project_id(db_session, project_id=1)
    assert payment.payment_status == "released"


@pytest.mark.asyncio
async def test_rejected_dispute_only_records_decision(
    db_session: AsyncSession, unlocked_project, owner, bidder
):
    """Test: A dispute decided against the bidder leaves work and payment as they were."""
    work = await _submit_until_attempt(db_session, owner, bidder, 5)
    await work_service.reject_work(db_session, work_id=work.work_id, owner_id=owner.id)
    await work_service.raise_dispute(
        db_session, work_id=work.work_id, bidder_id=bidder.id, reason="Please review"
    )

    resolved = await work_service.resolve_dispute(
        db_session, work_id=work.work_id, decision="rejected", admin_reason="Brief not met"
    )

    assert resolved.dispute_status == "resolved_rejected"
    assert resolved.work_status == "rejected"
    payment = await project_payments_repo.get_by_project_id(db_session, project_id=1)
    assert payment.payment_status == "verified"

    with pytest.raises(InvalidStateError):
        await work_service.resolve_dispute(
            db_session, work_id=work.work_id, decision="accepted", admin_reason=""
        )
