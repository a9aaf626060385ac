"""Repository for User database operations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User


async def get_by_id(session: AsyncSession, *, user_id: UUID) -> User | None:
    """
    Get a user by ID.

    Args:
        session: Database session
        user_id: User ID to fetch

    Returns:
        User if found, None otherwise
    """
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create(session: AsyncSession, user: User) -> User:
    """Create a new user."""
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def get_by_email(session: AsyncSession, *, email: str) -> User | None:
    """Get a user by (lower-cased) email."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()
