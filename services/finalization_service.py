"""Finalization and escrow: pick the winning bid and open a pending payment.

The four writes (project, winning bid, counter, payment) share one transaction.
Either all of them commit or none do.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

import config
from models.project import Project
from models.project_payment import PaymentArtifact, ProjectPayment
from repos import bids_repo, project_payments_repo, projects_repo
from services import payment_presentation, sequence_service
from services.errors import DomainValidationError, ForbiddenError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


class FinalizationResult(BaseModel):
    """Finalized project, its escrow payment and the collection instruction."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project: Project
    payment: ProjectPayment
    artifact: PaymentArtifact


def round_amount(value: float) -> float:
    """Round half away from zero to a whole currency unit."""
    return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_bid_amount(bid_amount: float) -> tuple[float, float]:
    """
    Split a bid into the platform cut and the amount payable to the bidder.

    Returns:
        (admin_cut, final_amount)
    """
    admin_cut = round_amount(bid_amount * config.settings.PLATFORM_FEE_RATE)
    final_amount = round_amount(bid_amount - admin_cut)
    return admin_cut, final_amount


async def finalize(
    session: AsyncSession,
    *,
    project_id: int,
    owner_id: UUID,
    bid_id: int,
    bid_amount: float,
) -> FinalizationResult:
    """
    Assign an open project to the author of one of its bids.

    Losing bids are left pending.

    Args:
        session: Database session
        project_id: Project to finalize
        owner_id: Caller; must own the project
        bid_id: Winning bid
        bid_amount: Agreed amount

    Returns:
        FinalizationResult

    Raises:
        NotFoundError: project or bid (for this project) not found
        ForbiddenError: caller is not the owner
        InvalidStateError: project is not open
        DomainValidationError: bid_amount is not positive
    """
    if bid_amount <= 0:
        raise DomainValidationError("Bid amount must be positive", bid_amount=bid_amount)

    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized to finalize bid")
    if project.status != "open":
        raise InvalidStateError("Project is not open for bidding", status=project.status)

    bid = await bids_repo.get_by_bid_id(session, bid_id=bid_id, project_id=project_id)
    if not bid:
        raise NotFoundError("Bid not found")

    admin_cut, final_amount = split_bid_amount(bid_amount)

    try:
        project.status = "assigned"
        project.assigned_to = bid.user_id
        bid.status = "accepted"

        payment_id = await sequence_service.next_id(session, sequence_service.PAYMENT_ID)
        payment = await project_payments_repo.create(
            session,
            ProjectPayment(
                payment_id=payment_id,
                project_id=project.project_id,
                bidder_id=bid.user_id,
                owner_id=project.owner_id,
                bid_amount=bid_amount,
                admin_cut=admin_cut,
                final_amount=final_amount,
                payment_status="pending",
            ),
        )
        await session.commit()
    except Exception:
        await session.rollback()
        logger.exception("Finalization of project %s rolled back", project_id)
        raise

    await session.refresh(project)
    note = payment_presentation.payment_note(project.project_id, payment.payment_id)
    artifact = PaymentArtifact(
        payment_id=payment.payment_id,
        project_id=project.project_id,
        **payment_presentation.build_payment_artifact(bid_amount, note),
    )

    logger.info(
        "Project %s finalized with bid %s, payment %s (cut=%s, final=%s)",
        project_id,
        bid_id,
        payment.payment_id,
        admin_cut,
        final_amount,
    )
    return FinalizationResult(project=project, payment=payment, artifact=artifact)
