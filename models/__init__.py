"""Database models."""

from db import Base

# Import all models so Alembic can detect them
from models.user import User
from models.counter import Counter
from models.user_subscription import UserSubscription
from models.project import Project
from models.bid import Bid
from models.project_payment import ProjectPayment
from models.project_work import ProjectWork
from models.notification import Notification

__all__ = [
    "Base",
    "User",
    "Counter",
    "UserSubscription",
    "Project",
    "Bid",
    "ProjectPayment",
    "ProjectWork",
    "Notification",
]
