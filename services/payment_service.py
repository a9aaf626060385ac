"""Payment verification gate.

Owners submit the UPI transaction reference; only an administrator can move a
payment to ``verified``. A verified payment unlocks chat and work submission.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.project_payment import (
    PAYMENT_STATUS_ORDER,
    ProjectPayment,
    ProjectPaymentResponse,
    ProjectPaymentWithArtifact,
)
from repos import project_payments_repo, projects_repo
from services import notification_service, payment_presentation
from services.errors import (
    ConflictError,
    DomainValidationError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


async def is_unlocked(session: AsyncSession, *, project_id: int) -> bool:
    """True once the project's escrow payment has been verified by an admin."""
    return await project_payments_repo.exists_with_status(
        session,
        project_id=project_id,
        status="verified",
    )


async def submit_transaction_ref(
    session: AsyncSession,
    *,
    payment_id: int,
    owner_id: UUID,
    transaction_id: str,
) -> ProjectPayment:
    """
    Store the owner's UPI transaction reference. The status is not changed.

    Raises:
        DomainValidationError: empty reference
        NotFoundError: payment not found
        ForbiddenError: caller is not the paying owner
    """
    transaction_id = (transaction_id or "").strip()
    if not transaction_id:
        raise DomainValidationError("Transaction ID is required")

    payment = await project_payments_repo.get_by_payment_id(session, payment_id=payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    if payment.owner_id != owner_id:
        raise ForbiddenError("Unauthorized to submit transaction ID")

    payment.transaction_id = transaction_id
    payment.updated_at = datetime.utcnow()
    await session.commit()
    await session.refresh(payment)
    logger.info("Transaction ID submitted for payment %s", payment_id)
    return payment


async def admin_verify(
    session: AsyncSession,
    *,
    payment_id: int,
    status: str,
) -> ProjectPayment:
    """
    Set a payment's status (administrators only; enforced by the caller).

    Status only moves forward one step at a time: pending -> verified -> released.

    Raises:
        NotFoundError: payment not found
        ConflictError: payment is already in that status
        InvalidStateError: the change would move the status backwards or skip
            verification
    """
    if status not in PAYMENT_STATUS_ORDER:
        raise DomainValidationError(f"Unknown payment status {status!r}")

    payment = await project_payments_repo.get_by_payment_id(session, payment_id=payment_id)
    if not payment:
        raise NotFoundError("Payment not found")

    current = payment.payment_status
    if current == status:
        raise ConflictError(f"Payment is already {current}", payment_status=current)
    if PAYMENT_STATUS_ORDER[status] < PAYMENT_STATUS_ORDER[current]:
        raise InvalidStateError(
            f"Cannot move payment from {current} back to {status}",
            payment_status=current,
        )
    if PAYMENT_STATUS_ORDER[status] != PAYMENT_STATUS_ORDER[current] + 1:
        raise InvalidStateError(
            f"Cannot move payment from {current} to {status} without verification",
            payment_status=current,
        )

    payment.payment_status = status
    payment.updated_at = datetime.utcnow()
    if status == "verified":
        payment.verified_at = datetime.utcnow()
    await session.commit()
    await session.refresh(payment)
    logger.info("Payment %s moved from %s to %s", payment_id, current, status)

    if status == "verified":
        project = await projects_repo.get_by_project_id(session, project_id=payment.project_id)
        project_name = project.project_name if project else f"#{payment.project_id}"
        await notification_service.notify(
            session,
            recipient_id=payment.bidder_id,
            kind="payment_verified",
            project_id=payment.project_id,
            message=(
                f'Your bid for project "{project_name}" (Project ID: {payment.project_id}) '
                "has been accepted and payment is verified. You can start the work now. "
                "Payment will be released after work verification."
            ),
        )

    return payment


async def get_project_payment(
    session: AsyncSession,
    *,
    project_id: int,
    user_id: UUID,
    is_admin: bool = False,
) -> ProjectPaymentWithArtifact:
    """
    Get a project's payment with a regenerated collection instruction.

    Raises:
        NotFoundError: no payment for the project
        ForbiddenError: caller is neither owner, bidder nor admin
    """
    payment = await project_payments_repo.get_by_project_id(session, project_id=project_id)
    if not payment:
        raise NotFoundError("Payment not found for this project")
    if not is_admin and user_id not in (payment.owner_id, payment.bidder_id):
        raise ForbiddenError("Unauthorized to view this payment")

    note = payment_presentation.payment_note(payment.project_id, payment.payment_id)
    artifact = payment_presentation.build_payment_artifact(payment.bid_amount, note)
    return ProjectPaymentWithArtifact(
        **ProjectPaymentResponse.model_validate(payment).model_dump(),
        **artifact,
    )


async def list_pending_payments(session: AsyncSession) -> list[ProjectPayment]:
    """Payments waiting for admin verification."""
    return await project_payments_repo.list_by_status(session, status="pending")
