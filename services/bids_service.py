"""Service layer for the bid engine."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bid import Bid, BidCreate, BidProjectSnapshot, BidResponse, BidUpdate, UserBidResponse
from repos import bids_repo, project_payments_repo, projects_repo
from services import quota_service, sequence_service
from services.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

DUPLICATE_BID_MESSAGE = "You have already placed a bid on this project. Please update your existing bid."


async def place_bid(
    session: AsyncSession,
    *,
    user_id: UUID,
    payload: BidCreate,
) -> Bid:
    """
    Place a bid on an open project.

    Args:
        session: Database session
        user_id: Bidding user
        payload: Project id, amount and proposal

    Returns:
        Created bid (status "pending")

    Raises:
        NotFoundError: no open project with that id
        ConflictError: the user already bid on the project (carries bid_id)
        QuotaExceededError: free or subscription bid limit reached
    """
    project = await projects_repo.get_by_project_id(
        session,
        project_id=payload.project_id,
        status="open",
    )
    if not project:
        raise NotFoundError("Project not found or not open for bidding.")

    existing = await bids_repo.get_for_project_and_user(
        session,
        project_id=payload.project_id,
        user_id=user_id,
    )
    if existing:
        raise ConflictError(DUPLICATE_BID_MESSAGE, bid_id=existing.bid_id)

    decision = await quota_service.check_bid_quota(session, user_id=user_id)
    if not decision.allowed:
        raise QuotaExceededError(decision.message, used=decision.used, limit=decision.limit)

    try:
        bid_id = await sequence_service.next_id(session, sequence_service.BID_ID)
        bid = await bids_repo.create(
            session,
            Bid(
                bid_id=bid_id,
                project_id=payload.project_id,
                user_id=user_id,
                amount=payload.amount,
                proposal=payload.proposal.strip(),
                status="pending",
            ),
        )
        await quota_service.consume_bid(session, user_id=user_id, decision=decision)
        await session.commit()
    except IntegrityError:
        # Lost a race against a concurrent bid by the same user
        await session.rollback()
        existing = await bids_repo.get_for_project_and_user(
            session,
            project_id=payload.project_id,
            user_id=user_id,
        )
        raise ConflictError(
            DUPLICATE_BID_MESSAGE,
            bid_id=existing.bid_id if existing else None,
        )
    except Exception:
        await session.rollback()
        raise

    logger.info("Bid %s placed on project %s by %s", bid.bid_id, bid.project_id, user_id)
    return bid


async def update_bid(
    session: AsyncSession,
    *,
    bid_id: int,
    user_id: UUID,
    payload: BidUpdate,
) -> Bid:
    """
    Update amount and/or proposal of one's own bid while the project is open.

    Raises:
        NotFoundError: no bid with that id owned by the user
        InvalidStateError: the project is no longer open
    """
    bid = await bids_repo.get_by_bid_id(session, bid_id=bid_id, user_id=user_id)
    if not bid:
        raise NotFoundError("Bid not found or unauthorized")

    project = await projects_repo.get_by_project_id(
        session,
        project_id=bid.project_id,
        status="open",
    )
    if not project:
        raise InvalidStateError("Project is not open for bidding")

    if payload.amount is not None:
        bid.amount = payload.amount
    if payload.proposal is not None:
        bid.proposal = payload.proposal.strip()
    bid.updated_at = datetime.utcnow()

    await session.commit()
    await session.refresh(bid)
    logger.info("Updated bid %s for user %s", bid_id, user_id)
    return bid


async def list_user_bids(session: AsyncSession, *, user_id: UUID) -> list[UserBidResponse]:
    """
    List a user's bids with a snapshot of project and payment state.

    A missing project or payment never fails the listing; placeholders are used.
    """
    bids = await bids_repo.list_by_user(session, user_id=user_id)
    projects = await projects_repo.list_by_project_ids(
        session,
        project_ids=[bid.project_id for bid in bids],
    )
    projects_by_id = {project.project_id: project for project in projects}

    enriched = []
    for bid in bids:
        project = projects_by_id.get(bid.project_id)
        if project:
            snapshot = BidProjectSnapshot(
                project_id=project.project_id,
                project_name=project.project_name,
                status=project.status,
            )
        else:
            snapshot = BidProjectSnapshot(
                project_id=bid.project_id,
                project_name="Unknown Project",
                status="Unknown",
            )

        payment = await project_payments_repo.get_by_project_id(
            session,
            project_id=bid.project_id,
            bidder_id=user_id,
        )
        enriched.append(
            UserBidResponse(
                **BidResponse.model_validate(bid).model_dump(),
                project=snapshot,
                payment_status=payment.payment_status if payment else "pending",
                payment_id=payment.payment_id if payment else None,
            )
        )
    return enriched


async def list_project_bids(
    session: AsyncSession,
    *,
    project_id: int,
    owner_id: UUID,
) -> list[Bid]:
    """
    List the bids on a project (owner only).

    Raises:
        NotFoundError: if project not found
        ForbiddenError: caller is not the owner
    """
    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized to view bids")
    return await bids_repo.list_by_project(session, project_id=project_id)
