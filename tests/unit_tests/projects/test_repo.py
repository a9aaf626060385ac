"""Unit tests for projects repository layer.

These tests verify database operations in isolation.
"""

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.bid import Bid
from models.project import Project
from repos import bids_repo, projects_repo


@pytest.mark.asyncio
async def test_repo_create_project(db_session: AsyncSession, owner):
    """Test: Repository can create a project with defaults filled in."""
    project = Project(
        project_id=7,
        owner_id=owner.id,
        project_name="Audiobook edit",
        description="Clean up ten chapters",
        skills=["editing"],
        min_budget=300,
        max_budget=600,
        duration_days=10,
        chat_room_id="chat_7",
    )

    created = await projects_repo.create(db_session, project)

    assert created.id is not None
    assert created.status == "open"
    assert created.additional_info == ""
    assert created.skills == ["editing"]


@pytest.mark.asyncio
async def test_repo_get_by_project_id_with_status(db_session: AsyncSession, owner, project_factory):
    """Test: The optional status filter narrows the lookup."""
    await project_factory(owner, 1, status="assigned")

    assert await projects_repo.get_by_project_id(db_session, project_id=1) is not None
    assert await projects_repo.get_by_project_id(db_session, project_id=1, status="open") is None


@pytest.mark.asyncio
async def test_repo_list_by_owner(db_session: AsyncSession, owner, bidder, project_factory):
    """Test: Only the owner's projects are listed."""
    await project_factory(owner, 1)
    await project_factory(owner, 2)
    await project_factory(bidder, 3)

    projects = await projects_repo.list_by_owner(db_session, owner_id=owner.id)

    assert sorted(p.project_id for p in projects) == [1, 2]


@pytest.mark.asyncio
async def test_repo_list_open_for_browsing_budget_overlap(db_session: AsyncSession, owner, project_factory):
    """Test: Budget filters keep projects whose range overlaps the requested one."""
    await project_factory(owner, 1, min_budget=100, max_budget=500)
    await project_factory(owner, 2, min_budget=400, max_budget=900)
    await project_factory(owner, 3, min_budget=1000, max_budget=2000)

    projects = await projects_repo.list_open_for_browsing(
        db_session, exclude_owner_id=uuid4(), min_budget=450, max_budget=950
    )

    assert sorted(p.project_id for p in projects) == [1, 2]


@pytest.mark.asyncio
async def test_repo_list_bid_ids_in_order(db_session: AsyncSession, owner, bidder, other_bidder, project_factory):
    """Test: Bid ids of a project come back in placement order."""
    await project_factory(owner, 1)
    for bid_id, user in ((5, other_bidder), (3, bidder)):
        await bids_repo.create(
            db_session,
            Bid(bid_id=bid_id, project_id=1, user_id=user.id, amount=10, proposal="p", status="pending"),
        )
    await db_session.commit()

    assert await projects_repo.list_bid_ids(db_session, project_id=1) == [3, 5]
