"""Bid model - one user's offer on an open project."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

BidStatus = Literal["pending", "accepted", "rejected"]


class Bid(Base):
    """Bid ORM model."""

    __tablename__ = "bids"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    bid_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.project_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    proposal: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
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

    # Backstop for the pre-insert duplicate check in bids_service
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="ux_bids_project_user"),
    )


def _strip_proposal(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Proposal must not be blank")
    return v


# Pydantic schemas
class BidCreate(BaseModel):
    """Schema for placing a bid."""

    project_id: int
    amount: float = Field(gt=0)
    proposal: str = Field(min_length=1)

    @field_validator("proposal")
    @classmethod
    def validate_proposal(cls, v: str) -> str:
        """Strip surrounding whitespace and reject a blank proposal"""
        return _strip_proposal(v)


class BidUpdate(BaseModel):
    """Schema for updating a bid (only provided fields are changed)."""

    amount: float | None = Field(default=None, gt=0)
    proposal: str | None = Field(default=None, min_length=1)

    @field_validator("proposal")
    @classmethod
    def validate_proposal(cls, v: str | None) -> str | None:
        """Strip surrounding whitespace and reject a blank proposal"""
        return v if v is None else _strip_proposal(v)


class BidResponse(BaseModel):
    """Schema for bid response."""

    model_config = ConfigDict(from_attributes=True)

    bid_id: int
    project_id: int
    user_id: UUID
    amount: float
    proposal: str
    status: str
    created_at: datetime
    updated_at: datetime


class BidProjectSnapshot(BaseModel):
    """Denormalized project fields shown next to a user's bid."""

    project_id: int
    project_name: str
    status: str


class UserBidResponse(BidResponse):
    """A user's bid enriched with project and payment state."""

    project: BidProjectSnapshot
    payment_status: str = "pending"
    payment_id: int | None = None
