"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coral_auth.auth.strategies import Authenticator
from coral_auth.constants import SESSION_USER_KEY
from coral_auth.db import get_db
from coral_auth.models.user import User
from coral_auth.users import UserService
from coral_auth.utils.logging import get_logger

logger = get_logger(__name__)


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_user_service(db: Annotated[AsyncSession, Depends(get_db)]) -> UserService:
    return UserService(db)


async def login(
    request: Request, authenticator: Authenticator, users: UserService, user: User
) -> None:
    """Persist the login's writes, then store the serialized user in the session.

    The commit happens first so the cookie never names a user that was not
    saved.

    Raises:
        HTTPException: 500 if the commit fails
    """
    user_id = authenticator.serialize_user(user)
    try:
        await users.db.commit()
    except SQLAlchemyError:
        logger.exception(f"Could not save login of user {user_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        ) from None
    request.session[SESSION_USER_KEY] = user_id


def logout(request: Request) -> None:
    request.session.clear()


async def get_optional_user(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> User | None:
    """Get current user from session if logged in."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None

    user = await authenticator.deserialize_user(user_id, users)

    # If user_id in session but user doesn't exist in DB, clear stale session
    if not user:
        request.session.clear()

    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Get current user, raising 401 if not authenticated."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user
