"""Login outcomes and the shared validation gate."""

from dataclasses import dataclass

from coral_auth.constants import REASON_USER_DISABLED, REASON_USER_NOT_FOUND
from coral_auth.models.user import User


@dataclass(frozen=True)
class Success:
    """The login succeeded for this user."""

    user: User


@dataclass(frozen=True)
class Rejected:
    """The login was refused; ``reason`` is safe to show to the user."""

    reason: str


@dataclass(frozen=True)
class Error:
    """The login could not be completed because something failed."""

    cause: BaseException


LoginResult = Success | Rejected | Error


def validate_user_login(user: User | None) -> LoginResult:
    """Check that a looked-up user is allowed to log in."""
    if not user:
        return Rejected(REASON_USER_NOT_FOUND)

    if user.disabled:
        return Rejected(REASON_USER_DISABLED)

    return Success(user)
