"""ProjectPayment model - escrow record created when a bid is finalized."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base
from models.project import ProjectResponse

PaymentStatus = Literal["pending", "verified", "released"]

# Forward-only ordering of payment states
PAYMENT_STATUS_ORDER = {"pending": 0, "verified": 1, "released": 2}


class ProjectPayment(Base):
    """ProjectPayment ORM model."""

    __tablename__ = "project_payments"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    payment_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    # One escrow record per project
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.project_id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
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
        index=True,
    )
    bid_amount: Mapped[float] = mapped_column(Float, nullable=False)
    admin_cut: Mapped[float] = mapped_column(Float, nullable=False)
    final_amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
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
class FinalizeRequest(BaseModel):
    """Schema for finalizing a project with a winning bid."""

    bid_id: int
    bid_amount: float = Field(gt=0)


class TransactionSubmit(BaseModel):
    """Schema for the owner submitting a UPI transaction reference."""

    transaction_id: str = Field(min_length=1)


class PaymentStatusUpdate(BaseModel):
    """Schema for admin payment verification."""

    payment_status: PaymentStatus


class PaymentArtifact(BaseModel):
    """Payment collection instruction shown to the project owner."""

    payment_id: int
    project_id: int
    upi_uri: str
    qr_code: str
    note: str


class ProjectPaymentResponse(BaseModel):
    """Schema for project payment response."""

    model_config = ConfigDict(from_attributes=True)

    payment_id: int
    project_id: int
    bidder_id: UUID
    owner_id: UUID
    bid_amount: float
    admin_cut: float
    final_amount: float
    payment_status: str
    transaction_id: str | None = None
    verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProjectPaymentWithArtifact(ProjectPaymentResponse):
    """Payment record together with its collection instruction."""

    upi_uri: str
    qr_code: str
    note: str


class FinalizeResponse(BaseModel):
    """Finalized project, its escrow payment and the collection instruction."""

    project: ProjectResponse
    payment: ProjectPaymentResponse
    artifact: PaymentArtifact
