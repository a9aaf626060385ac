"""User model and schema.

Users are supplied by the identity collaborator; the marketplace only keeps the
free-tier quota counters on them.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr
from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

Role = Literal["user", "studio", "admin", "manager", "accountant"]


class User(Base):
    """User ORM model."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")

    # Free-tier quota (one post and one bid per rolling window)
    free_posts_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_free_post_reset: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    free_bids_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_free_bid_reset: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


# Pydantic schemas
class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    full_name: str | None = None
    role: Role = "user"


class UserResponse(UserBase):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    free_posts_used: int
    free_bids_used: int
    created_at: datetime
