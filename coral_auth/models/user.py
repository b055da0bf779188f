"""User model."""

import uuid

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coral_auth.models.base import Base, TimestampMixin


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(Base, TimestampMixin):
    """User model for authentication."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_user_id)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    email: Mapped[str | None] = mapped_column(
        String(255), unique=True, index=True, nullable=True
    )
    avatar_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # Local credential (bcrypt hash); NULL for users created through OAuth only
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    disabled: Mapped[bool] = mapped_column(default=False)

    # Linked external identities
    # Eager "selectin" so callers can read profiles outside the session scope
    profiles: Mapped[list["UserProfile"]] = relationship(
        "UserProfile",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class UserProfile(Base, TimestampMixin):
    """An external provider identity linked to a user."""

    __tablename__ = "user_profiles"
    __table_args__ = (
        UniqueConstraint("provider", "external_id", name="uq_user_profiles_provider_external_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    provider: Mapped[str] = mapped_column(String(32))
    external_id: Mapped[str] = mapped_column(String(255))

    user: Mapped[User] = relationship("User", back_populates="profiles")

    def __repr__(self) -> str:
        return f"<UserProfile(provider={self.provider}, external_id={self.external_id})>"
