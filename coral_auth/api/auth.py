"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from coral_auth.auth.dependencies import (
    get_authenticator,
    get_current_user,
    get_user_service,
    login,
    logout,
)
from coral_auth.auth.result import Error, Rejected
from coral_auth.auth.strategies import Authenticator
from coral_auth.constants import STRATEGY_LOCAL
from coral_auth.exceptions import EmailAlreadyRegisteredError
from coral_auth.models.schemas import RegisterRequest, UserResponse
from coral_auth.models.user import User
from coral_auth.users import UserService

router = APIRouter()


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        avatar_url=user.avatar_url,
        providers=sorted(profile.provider for profile in user.profiles),
    )


@router.post("/local")
async def local_login(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Log in with an email and password (form or JSON body)."""
    result = await authenticator.authenticate(STRATEGY_LOCAL, request, users)

    if isinstance(result, Error):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )
    if isinstance(result, Rejected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.reason)

    await login(request, authenticator, users, result.user)
    return user_response(result.user)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Create a local account and log it in."""
    try:
        user = await users.create_local_user(body.email, body.password, body.username)
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email already registered"
        ) from None

    await login(request, authenticator, users, user)
    return user_response(user)


@router.get("/logout")
async def logout_user(request: Request) -> RedirectResponse:
    """Log out the current user."""
    logout(request)
    return RedirectResponse(url="/", status_code=302)


@router.get("/me")
async def get_me(user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    """Get current authenticated user."""
    return user_response(user)
