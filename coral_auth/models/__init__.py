"""SQLAlchemy models."""

from coral_auth.models.base import Base
from coral_auth.models.user import User, UserProfile

__all__ = [
    "Base",
    "User",
    "UserProfile",
]
