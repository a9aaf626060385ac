"""Work submission and review state machine.

Per submission: pending -> accepted | needs_improvement | welldone | rejected.
The assigned bidder may submit a new attempt after any outcome except
``rejected``; a rejected submission can only be appealed through a dispute,
which an administrator resolves.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

import config
from models.project import TERMINAL_PROJECT_STATUSES, Project
from models.project_work import ProjectWork
from repos import project_payments_repo, project_works_repo, projects_repo
from services import notification_service, payment_service, sequence_service
from services.errors import (
    DomainValidationError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

GRADING_STATUSES = ("needs_improvement", "welldone")


async def _get_work_and_project(session: AsyncSession, work_id: int) -> tuple[ProjectWork, Project]:
    work = await project_works_repo.get_by_work_id(session, work_id=work_id)
    if not work:
        raise NotFoundError("Work submission not found")
    project = await projects_repo.get_by_project_id(session, project_id=work.project_id)
    if not project:
        raise NotFoundError("Project not found")
    return work, project


def _require_pending(work: ProjectWork) -> None:
    if work.work_status != "pending":
        raise InvalidStateError("Work is not in pending state", work_status=work.work_status)


def _require_not_closed(project: Project) -> None:
    # Completed, closed and rejected projects never change status again
    if project.status in TERMINAL_PROJECT_STATUSES:
        raise InvalidStateError("Project is already closed", status=project.status)


async def ensure_can_submit(
    session: AsyncSession,
    *,
    project_id: int,
    bidder_id: UUID,
) -> Project:
    """
    Check that a bidder may submit work for a project, without writing anything.

    Returns:
        The project

    Raises:
        NotFoundError: project not found
        ForbiddenError: payment not verified, caller not assigned, or an
            earlier submission was rejected
        InvalidStateError: project already closed out
    """
    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")

    if not await payment_service.is_unlocked(session, project_id=project_id):
        raise ForbiddenError("Payment not verified")
    if project.assigned_to != bidder_id:
        raise ForbiddenError("Not assigned to this project")
    if await project_works_repo.has_rejected(session, project_id=project_id, bidder_id=bidder_id):
        raise ForbiddenError("Work rejected. Please raise a dispute.")
    _require_not_closed(project)
    return project


async def submit_work(
    session: AsyncSession,
    *,
    project_id: int,
    bidder_id: UUID,
    file_ref: str,
) -> ProjectWork:
    """
    Submit a deliverable for an assigned project.

    Args:
        session: Database session
        project_id: Project the work is for
        bidder_id: Caller; must be the assigned bidder
        file_ref: Reference returned by the file storage

    Returns:
        The new submission (status "pending")

    Raises:
        NotFoundError: project not found
        ForbiddenError: payment not verified, caller not assigned, or an
            earlier submission was rejected
        InvalidStateError: project already closed out
    """
    if not file_ref:
        raise DomainValidationError("No file uploaded")

    project = await ensure_can_submit(session, project_id=project_id, bidder_id=bidder_id)

    previous = await project_works_repo.count_for_bidder(
        session,
        project_id=project_id,
        bidder_id=bidder_id,
    )

    try:
        work_id = await sequence_service.next_id(session, sequence_service.WORK_ID)
        submission_id = await sequence_service.next_id(session, sequence_service.SUBMISSION_ID)
        work = await project_works_repo.create(
            session,
            ProjectWork(
                work_id=work_id,
                submission_id=submission_id,
                project_id=project_id,
                bidder_id=bidder_id,
                owner_id=project.owner_id,
                file_url=file_ref,
                attempt_number=previous + 1,
                work_status="pending",
            ),
        )
        project.status = "work_submitted"
        project.work_url = file_ref
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Work %s (attempt %s) submitted for project %s",
        work.work_id,
        work.attempt_number,
        project_id,
    )
    await notification_service.notify(
        session,
        recipient_id=project.owner_id,
        kind="work_submitted",
        project_id=project_id,
        message=(
            f'New work (attempt {work.attempt_number}) was submitted for project '
            f'"{project.project_name}" (Project ID: {project_id}).'
        ),
    )
    return work


async def list_project_work(
    session: AsyncSession,
    *,
    project_id: int,
    user_id: UUID,
) -> list[ProjectWork]:
    """
    List submissions for a project (owner or assigned bidder).

    Raises:
        NotFoundError: project not found
        ForbiddenError: caller is neither owner nor assigned bidder
    """
    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    if user_id not in (project.owner_id, project.assigned_to):
        raise ForbiddenError("Unauthorized to view work submissions")
    return await project_works_repo.list_by_project(session, project_id=project_id)


async def get_work_for_download(session: AsyncSession, *, work_id: int, user_id: UUID) -> ProjectWork:
    """
    Get a submission whose file the caller may download (owner or submitting bidder).

    Raises:
        NotFoundError: submission not found
        ForbiddenError: caller is neither the project owner nor the bidder
    """
    work = await project_works_repo.get_by_work_id(session, work_id=work_id)
    if not work:
        raise NotFoundError("Work submission not found")
    if user_id not in (work.owner_id, work.bidder_id):
        raise ForbiddenError("Unauthorized to download file")
    return work


async def accept_work(session: AsyncSession, *, work_id: int, owner_id: UUID) -> ProjectWork:
    """
    Accept a pending submission and complete the project.

    Raises:
        NotFoundError: submission or project not found
        ForbiddenError: caller is not the owner
        InvalidStateError: submission is not pending, or the project is closed
    """
    work, project = await _get_work_and_project(session, work_id)
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized: Only project owner can accept work")
    _require_pending(work)
    _require_not_closed(project)

    work.work_status = "accepted"
    work.updated_at = datetime.utcnow()
    project.status = "completed"
    await session.commit()
    await session.refresh(work)
    logger.info("Work %s accepted, project %s completed", work_id, project.project_id)
    return work


async def reject_work(session: AsyncSession, *, work_id: int, owner_id: UUID) -> ProjectWork:
    """
    Reject a pending submission. Only allowed from the fifth attempt on.

    Raises:
        NotFoundError: submission or project not found
        ForbiddenError: caller is not the owner
        InvalidStateError: submission is not pending, too few attempts, or
            the project is closed
    """
    work, project = await _get_work_and_project(session, work_id)
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized: Only project owner can reject work")
    _require_pending(work)
    _require_not_closed(project)

    min_attempts = config.settings.MIN_ATTEMPTS_BEFORE_REJECT
    if work.attempt_number < min_attempts:
        raise InvalidStateError(
            f"Cannot reject work: Less than {min_attempts} attempts",
            attempt_number=work.attempt_number,
            required_attempts=min_attempts,
        )

    work.work_status = "rejected"
    work.updated_at = datetime.utcnow()
    project.status = "rejected"
    await session.commit()
    await session.refresh(work)
    logger.info("Work %s rejected, project %s rejected", work_id, project.project_id)
    return work


async def comment_on_work(
    session: AsyncSession,
    *,
    work_id: int,
    owner_id: UUID,
    comment: str,
    work_status: str | None = None,
) -> ProjectWork:
    """
    Leave owner feedback on a submission, optionally grading a pending one.

    Args:
        session: Database session
        work_id: Submission to comment on
        owner_id: Caller; must own the project
        comment: Feedback text
        work_status: "needs_improvement" or "welldone" to close out a pending
            submission; None to only store the comment

    Raises:
        NotFoundError: submission or project not found
        ForbiddenError: caller is not the owner
        InvalidStateError: grading a submission that is not pending
    """
    work, project = await _get_work_and_project(session, work_id)
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized: Only project owner can add comments")

    if work_status is not None:
        if work_status not in GRADING_STATUSES:
            raise DomainValidationError(f"Unsupported work status {work_status!r}")
        _require_pending(work)
        work.work_status = work_status

    work.owner_comment = comment
    work.updated_at = datetime.utcnow()
    await session.commit()
    await session.refresh(work)
    return work


async def raise_dispute(
    session: AsyncSession,
    *,
    work_id: int,
    bidder_id: UUID,
    reason: str,
) -> ProjectWork:
    """
    Appeal a rejected submission.

    Raises:
        NotFoundError: submission not found
        ForbiddenError: caller is not the submitting bidder
        InvalidStateError: work not rejected, or a dispute already exists
    """
    work = await project_works_repo.get_by_work_id(session, work_id=work_id)
    if not work:
        raise NotFoundError("Work submission not found")
    if work.bidder_id != bidder_id:
        raise ForbiddenError("Unauthorized to raise dispute")
    if work.work_status != "rejected":
        raise InvalidStateError(
            "Cannot raise dispute unless work is rejected",
            work_status=work.work_status,
        )
    if work.dispute_status != "none":
        raise InvalidStateError(
            "Dispute already raised or resolved",
            dispute_status=work.dispute_status,
        )

    work.dispute_status = "raised"
    work.dispute_reason = reason
    work.updated_at = datetime.utcnow()
    await session.commit()
    await session.refresh(work)
    logger.info("Dispute raised on work %s", work_id)
    return work


async def resolve_dispute(
    session: AsyncSession,
    *,
    work_id: int,
    decision: str,
    admin_reason: str,
) -> ProjectWork:
    """
    Settle a raised dispute (administrators only; enforced by the caller).

    An accepted dispute accepts the work, completes the project and releases the
    payment in one transaction. A rejected dispute only records the decision.

    Raises:
        NotFoundError: submission not found
        InvalidStateError: no dispute raised for the submission
    """
    if decision not in ("accepted", "rejected"):
        raise DomainValidationError(f"Unsupported decision {decision!r}")

    work = await project_works_repo.get_by_work_id(session, work_id=work_id)
    if not work:
        raise NotFoundError("Work submission not found")
    if work.dispute_status != "raised":
        raise InvalidStateError(
            "No dispute raised for this work",
            dispute_status=work.dispute_status,
        )

    try:
        work.admin_decision = admin_reason
        work.updated_at = datetime.utcnow()
        if decision == "accepted":
            work.dispute_status = "resolved_accepted"
            work.work_status = "accepted"

            project = await projects_repo.get_by_project_id(session, project_id=work.project_id)
            if project:
                project.status = "completed"
            payment = await project_payments_repo.get_by_project_id(
                session,
                project_id=work.project_id,
            )
            if payment:
                payment.payment_status = "released"
                payment.updated_at = datetime.utcnow()
        else:
            work.dispute_status = "resolved_rejected"
        await session.commit()
    except Exception:
        await session.rollback()
        logger.exception("Dispute resolution for work %s rolled back", work_id)
        raise

    await session.refresh(work)
    logger.info("Dispute on work %s resolved: %s", work_id, decision)
    return work
