"""User storage."""

from coral_auth.users.passwords import hash_password, verify_password
from coral_auth.users.service import UserService
from coral_auth.users.store import UserStore

__all__ = [
    "UserService",
    "UserStore",
    "hash_password",
    "verify_password",
]
