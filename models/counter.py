"""Counter model - named sequence used to hand out numeric ids."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


class Counter(Base):
    """Counter ORM model - one row per entity type (projectId, bidId, ...)."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
