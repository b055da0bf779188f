"""User lookup contract consumed by the login strategies."""

from typing import Protocol

from coral_auth.models.schemas import ExternalProfile
from coral_auth.models.user import User


class UserStore(Protocol):
    """Operations the authentication adapter needs from user storage."""

    async def find_local_user(self, email: str, password: str) -> User | None:
        """Return the user owning these local credentials, or None."""
        ...

    async def find_or_create_external_user(self, profile: ExternalProfile) -> User:
        """Return the user linked to an external profile, creating it on first login."""
        ...

    async def find_by_id(self, user_id: str) -> User | None:
        """Return the user with this id, or None."""
        ...
