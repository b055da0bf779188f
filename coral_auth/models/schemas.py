"""Pydantic schemas."""

import re

from pydantic import BaseModel, EmailStr, Field


class ExternalProfile(BaseModel):
    """Provider-neutral profile returned by an OAuth provider."""

    provider: str
    id: str
    display_name: str | None = None
    email: str | None = None
    email_verified: bool = False
    avatar_url: str | None = None

    def preferred_username(self) -> str:
        """Username candidate derived from the email or display name."""
        if self.email:
            return self.email.split("@")[0]
        if self.display_name:
            return re.sub(r"\s+", "_", self.display_name.strip()).lower()
        return f"{self.provider}_{self.id}"


class LocalCredentials(BaseModel):
    """Email/password pair submitted to the local strategy."""

    email: str
    password: str


class RegisterRequest(BaseModel):
    """Schema for creating a local account."""

    email: EmailStr
    password: str = Field(min_length=8)
    username: str | None = None


class UserResponse(BaseModel):
    """Public view of a user."""

    id: str
    username: str
    email: str | None = None
    avatar_url: str | None = None
    providers: list[str] = []
