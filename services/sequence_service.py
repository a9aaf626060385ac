"""Sequence allocator handing out numeric external ids per entity type."""

from sqlalchemy.ext.asyncio import AsyncSession

from repos import counters_repo

PROJECT_ID = "projectId"
BID_ID = "bidId"
PAYMENT_ID = "paymentId"
WORK_ID = "workId"
SUBMISSION_ID = "submissionId"
SUBSCRIPTION_ID = "subscriptionId"


async def next_id(session: AsyncSession, counter_name: str) -> int:
    """
    Allocate the next id for a counter.

    The increment joins the caller's transaction, so an aborted operation does
    not leave a half-created entity behind. Storage errors propagate.

    Args:
        session: Database session
        counter_name: Counter name, one of the constants in this module

    Returns:
        The allocated id (first call for a name returns 1)
    """
    return await counters_repo.increment(session, name=counter_name)
