"""ProjectWork model - one deliverable submission by the assigned bidder."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

WorkStatus = Literal["pending", "accepted", "needs_improvement", "welldone", "rejected"]
DisputeStatus = Literal["none", "raised", "resolved_accepted", "resolved_rejected"]
DisputeDecision = Literal["accepted", "rejected"]


class ProjectWork(Base):
    """ProjectWork ORM model."""

    __tablename__ = "project_works"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    work_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    submission_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.project_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    bidder_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    work_status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")
    owner_comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    dispute_status: Mapped[str] = mapped_column(String(30), nullable=False, default="none")
    dispute_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    admin_decision: Mapped[str] = mapped_column(Text, nullable=False, default="")
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
class WorkComment(BaseModel):
    """Schema for an owner comment, optionally grading a pending submission."""

    owner_comment: str
    work_status: Literal["needs_improvement", "welldone"] | None = None


class DisputeRaise(BaseModel):
    """Schema for raising a dispute on a rejected submission."""

    reason: str = Field(min_length=1)


class DisputeResolve(BaseModel):
    """Schema for an admin dispute decision."""

    decision: DisputeDecision
    admin_reason: str = ""


class ProjectWorkResponse(BaseModel):
    """Schema for project work response."""

    model_config = ConfigDict(from_attributes=True)

    work_id: int
    submission_id: int
    project_id: int
    bidder_id: UUID
    owner_id: UUID
    file_url: str
    attempt_number: int
    work_status: str
    owner_comment: str
    dispute_status: str
    dispute_reason: str
    admin_decision: str
    created_at: datetime
    updated_at: datetime
