"""Pytest configuration and fixtures."""

import asyncio
import os
import sys
from datetime import datetime, timedelta
from uuid import uuid4

# Point the app at the test database before config is imported
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_marketplace.db")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("JANITOR_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import config
import models  # noqa: F401
from auth.jwt import create_access_token
from db import Base
from main import app
from models.project import Project, chat_room_id_for
from models.user import User
from models.user_subscription import UserSubscription

# Fix Windows asyncio event loop
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Create test engine (no pooling so every session gets its own connection)
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a test database session on freshly created tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def override_get_db(db_session):
    """Override get_db dependency for testing."""
    from api.deps import get_db

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_get_db):
    """Create an HTTP client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def work_storage_dir(tmp_path, monkeypatch):
    """Store uploaded work files under the test's temp dir."""
    storage_dir = tmp_path / "project_work"
    monkeypatch.setattr(config.settings, "WORK_STORAGE_DIR", str(storage_dir))
    return storage_dir


def make_auth_headers(user: User) -> dict:
    """
    Helper function to create bearer auth headers for a user.

    Args:
        user: User the token is issued for

    Returns:
        Headers dict with Authorization
    """
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


async def make_user(session: AsyncSession, email: str, role: str = "user") -> User:
    """Persist a user with fresh quota counters."""
    user = User(
        id=uuid4(),
        email=email,
        full_name=email.split("@")[0].title(),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def owner(db_session):
    """User posting projects."""
    return await make_user(db_session, "owner@example.com")


@pytest_asyncio.fixture
async def bidder(db_session):
    """User bidding on projects."""
    return await make_user(db_session, "bidder@example.com")


@pytest_asyncio.fixture
async def other_bidder(db_session):
    """A second bidder."""
    return await make_user(db_session, "other-bidder@example.com")


@pytest_asyncio.fixture
async def admin(db_session):
    """Administrator verifying payments and resolving disputes."""
    return await make_user(db_session, "admin@example.com", role="admin")


@pytest.fixture
def auth_headers():
    """Factory returning bearer headers for a user."""
    return make_auth_headers


@pytest.fixture
def project_factory(db_session):
    """Insert projects directly, bypassing the post quota."""

    async def _make(owner: User, project_id: int, **overrides) -> Project:
        fields = {
            "project_id": project_id,
            "owner_id": owner.id,
            "project_name": f"Project {project_id}",
            "description": "Mix and master a four-track EP",
            "skills": ["mixing", "mastering"],
            "min_budget": 1000,
            "max_budget": 5000,
            "duration_days": 14,
            "status": "open",
            "chat_room_id": chat_room_id_for(project_id),
        }
        fields.update(overrides)
        project = Project(**fields)
        db_session.add(project)
        await db_session.commit()
        await db_session.refresh(project)
        return project

    return _make


@pytest.fixture
def subscription_factory(db_session):
    """Insert subscriptions with explicit terms and timestamps."""

    async def _make(user: User, subscription_id: int, **overrides) -> UserSubscription:
        now = datetime.utcnow()
        fields = {
            "subscription_id": subscription_id,
            "user_id": user.id,
            "plan_name": "Basic",
            "plan_price": 499,
            "plan_post_limit": 2,
            "plan_bid_limit": 2,
            "plan_validity_months": 1,
            "payment_status": "verified",
            "end_date": now + timedelta(days=30),
            "created_at": now,
        }
        fields.update(overrides)
        subscription = UserSubscription(**fields)
        db_session.add(subscription)
        await db_session.commit()
        await db_session.refresh(subscription)
        return subscription

    return _make


@pytest.fixture
def session_factory(db_session):
    """Independent sessions on the test database (tables already created)."""
    return TestSessionLocal


@pytest_asyncio.fixture
async def assigned_project(db_session, owner, bidder, project_factory):
    """Project 1 finalized to the bidder at 3000, payment still pending."""
    from models.bid import BidCreate
    from services import bids_service, finalization_service

    await project_factory(owner, 1)
    bid = await bids_service.place_bid(
        db_session,
        user_id=bidder.id,
        payload=BidCreate(project_id=1, amount=3000, proposal="Mixing in two weeks"),
    )
    return await finalization_service.finalize(
        db_session,
        project_id=1,
        owner_id=owner.id,
        bid_id=bid.bid_id,
        bid_amount=3000,
    )


@pytest_asyncio.fixture
async def unlocked_project(db_session, assigned_project):
    """assigned_project with its payment verified by an admin."""
    from services import payment_service

    await payment_service.admin_verify(
        db_session,
        payment_id=assigned_project.payment.payment_id,
        status="verified",
    )
    return assigned_project
