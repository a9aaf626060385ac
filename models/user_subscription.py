"""UserSubscription model - a purchased plan with post/bid limits and an expiry."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

SubscriptionPaymentStatus = Literal["pending", "verified", "failed", "expired"]
PlanName = Literal["Basic", "Pro", "Premium"]


class UserSubscription(Base):
    """UserSubscription ORM model."""

    __tablename__ = "user_subscriptions"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    subscription_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_name: Mapped[str] = mapped_column(String(50), nullable=False)
    plan_price: Mapped[float] = mapped_column(Float, nullable=False)
    plan_post_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plan_bid_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plan_validity_months: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    transaction_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    posts_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bids_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
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
class SubscriptionPurchase(BaseModel):
    """Schema for purchasing a plan.

    Plan CRUD lives outside this service, so the plan terms travel with the request.
    """

    plan_name: PlanName
    plan_price: float = Field(ge=0)
    plan_post_limit: int = Field(ge=0)
    plan_bid_limit: int = Field(ge=0)
    plan_validity_months: int = Field(ge=1)


class SubscriptionTransactionSubmit(BaseModel):
    """Schema for submitting the UPI transaction reference."""

    transaction_id: str = Field(min_length=1)


class SubscriptionStatusUpdate(BaseModel):
    """Schema for admin payment verification."""

    payment_status: SubscriptionPaymentStatus


class UserSubscriptionResponse(BaseModel):
    """Schema for user subscription response."""

    model_config = ConfigDict(from_attributes=True)

    subscription_id: int
    user_id: UUID
    plan_name: str
    plan_price: float
    plan_post_limit: int
    plan_bid_limit: int
    plan_validity_months: int
    payment_status: str
    transaction_id: str
    posts_used: int
    bids_used: int
    end_date: datetime
    created_at: datetime


class SubscriptionPurchaseResponse(BaseModel):
    """Pending purchase together with its payment collection instruction."""

    subscription: UserSubscriptionResponse
    upi_uri: str
    qr_code: str
    note: str
