"""Project model - a job posted for bidding."""

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db import Base

ProjectStatus = Literal["open", "assigned", "work_submitted", "completed", "closed", "rejected"]

TERMINAL_PROJECT_STATUSES = ("completed", "closed", "rejected")


def chat_room_id_for(project_id: int) -> str:
    """Chat room identifier derived from the numeric project id."""
    return f"chat_{project_id}"


class Project(Base):
    """Project ORM model."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    project_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)
    owner_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    min_budget: Mapped[float] = mapped_column(Float, nullable=False)
    max_budget: Mapped[float] = mapped_column(Float, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="open", index=True)
    assigned_to: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
    )
    work_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    additional_info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    chat_room_id: Mapped[str] = mapped_column(String(64), nullable=False)
    review_submitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
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
class ProjectBase(BaseModel):
    """Base project schema."""

    project_name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    skills: list[str] = Field(default_factory=list)
    min_budget: float = Field(ge=0)
    max_budget: float = Field(ge=0)
    duration_days: int = Field(ge=1)


class ProjectCreate(ProjectBase):
    """Schema for creating a project.

    Note: owner_id is NOT included - it's taken from the authenticated principal.
    """

    @field_validator("project_name", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank text"""
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProjectInfoUpdate(BaseModel):
    """Schema for updating the free-form info of an open project."""

    additional_info: str


class ProjectResponse(ProjectBase):
    """Schema for project response."""

    model_config = ConfigDict(from_attributes=True)

    project_id: int
    owner_id: UUID
    status: str
    assigned_to: UUID | None = None
    work_url: str | None = None
    additional_info: str
    chat_room_id: str
    review_submitted: bool
    bids: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
