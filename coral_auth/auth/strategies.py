"""Login strategies and the authenticator that runs them.

Every strategy is the same adapter: extract credentials from the request,
hand them to a user lookup, then pass the user through the validation gate.
Only the extraction and lookup functions differ per provider.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastapi import Request

from coral_auth.auth.result import Error, LoginResult, Rejected, Success, validate_user_login
from coral_auth.constants import (
    REASON_INCORRECT_CREDENTIALS,
    REASON_MISSING_CREDENTIALS,
    STRATEGY_LOCAL,
)
from coral_auth.exceptions import StrategyRejection, UnknownStrategyError, UserLookupError
from coral_auth.models.schemas import ExternalProfile, LocalCredentials
from coral_auth.models.user import User
from coral_auth.users.store import UserStore
from coral_auth.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

CredentialsT = TypeVar("CredentialsT")


@dataclass(frozen=True)
class Strategy(Generic[CredentialsT]):
    """A named way of logging in.

    Attributes:
        name: Registry key, also used in URLs (``/connect/<name>``)
        extract: Pulls credentials out of the incoming request. May raise
            ``StrategyRejection`` to refuse the attempt without an error.
        lookup: Resolves credentials to a user through the user store
        not_found_reason: Rejection reason used instead of the gate's
            "user not found" when the lookup returns nothing
    """

    name: str
    extract: Callable[[Request], Awaitable[CredentialsT]]
    lookup: Callable[[UserStore, CredentialsT], Awaitable[User | None]]
    not_found_reason: str | None = None


class Authenticator:
    """Registry of strategies plus session (de)serialization."""

    def __init__(self) -> None:
        self._strategies: dict[str, Strategy[Any]] = {}

    def use(self, strategy: Strategy[Any]) -> None:
        """Register a strategy, replacing any previous one with the same name."""
        self._strategies[strategy.name] = strategy
        logger.debug(f"Registered authentication strategy '{strategy.name}'")

    def get(self, name: str) -> Strategy[Any]:
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name) from None

    @property
    def names(self) -> list[str]:
        return list(self._strategies)

    async def authenticate(self, name: str, request: Request, users: UserStore) -> LoginResult:
        """Run one login attempt through the named strategy.

        Raises:
            UnknownStrategyError: If no strategy is registered under ``name``
        """
        strategy = self.get(name)
        log = LogContext(logger, strategy=name)

        try:
            credentials = await strategy.extract(request)
            user = await strategy.lookup(users, credentials)
        except StrategyRejection as e:
            log.info(f"Login rejected: {e.reason}")
            return Rejected(e.reason)
        except Exception as e:
            log.exception("Login failed")
            return Error(e)

        if user is None and strategy.not_found_reason:
            result: LoginResult = Rejected(strategy.not_found_reason)
        else:
            result = validate_user_login(user)

        if isinstance(result, Success):
            log.info(f"User {result.user.id} logged in")
        elif isinstance(result, Rejected):
            log.info(f"Login rejected: {result.reason}")
        return result

    @staticmethod
    def serialize_user(user: User) -> str:
        """Reduce a user to the id stored in the session."""
        return user.id

    @staticmethod
    async def deserialize_user(user_id: str, users: UserStore) -> User | None:
        """Load the session user.

        A missing user is returned as None, the same as an anonymous session.

        Raises:
            UserLookupError: If the user store fails
        """
        try:
            return await users.find_by_id(user_id)
        except Exception as e:
            raise UserLookupError(f"Failed to load session user {user_id}") from e


# ============== Local ==============


async def extract_local_credentials(request: Request) -> LocalCredentials:
    """Read ``email`` and ``password`` from a form or JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise StrategyRejection(REASON_MISSING_CREDENTIALS) from None
    else:
        data = await request.form()

    if not isinstance(data, Mapping):
        raise StrategyRejection(REASON_MISSING_CREDENTIALS)

    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise StrategyRejection(REASON_MISSING_CREDENTIALS)

    return LocalCredentials(email=email, password=password)


async def lookup_local_user(users: UserStore, credentials: LocalCredentials) -> User | None:
    return await users.find_local_user(credentials.email, credentials.password)


def local_strategy() -> Strategy[LocalCredentials]:
    """Email/password login against locally stored credentials."""
    return Strategy(
        name=STRATEGY_LOCAL,
        extract=extract_local_credentials,
        lookup=lookup_local_user,
        not_found_reason=REASON_INCORRECT_CREDENTIALS,
    )


# ============== OAuth ==============


async def lookup_external_user(users: UserStore, profile: ExternalProfile) -> User | None:
    return await users.find_or_create_external_user(profile)


def oauth_strategy(
    name: str, fetch_profile: Callable[[Request], Awaitable[ExternalProfile]]
) -> Strategy[ExternalProfile]:
    """Login through an OAuth provider's callback."""
    return Strategy(name=name, extract=fetch_profile, lookup=lookup_external_user)
