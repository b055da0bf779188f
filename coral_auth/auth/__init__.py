"""Authentication module."""

from coral_auth.auth.dependencies import get_current_user, get_optional_user
from coral_auth.auth.result import Error, LoginResult, Rejected, Success, validate_user_login
from coral_auth.auth.strategies import Authenticator, Strategy, local_strategy, oauth_strategy

__all__ = [
    "Authenticator",
    "Strategy",
    "local_strategy",
    "oauth_strategy",
    "LoginResult",
    "Success",
    "Rejected",
    "Error",
    "validate_user_login",
    "get_current_user",
    "get_optional_user",
]
