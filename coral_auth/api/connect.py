"""OAuth login endpoints (/connect/<provider>)."""

from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from coral_auth.auth.dependencies import get_authenticator, get_user_service, login
from coral_auth.auth.providers import OAuthProvider
from coral_auth.auth.result import Error, Rejected
from coral_auth.auth.strategies import Authenticator
from coral_auth.users import UserService

router = APIRouter()


def _get_provider(request: Request, provider: str) -> OAuthProvider:
    providers: dict[str, OAuthProvider] = request.app.state.oauth_providers
    if provider not in providers:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Login provider '{provider}' is not available",
        )
    return providers[provider]


@router.get("/{provider}")
async def connect(provider: str, request: Request) -> RedirectResponse:
    """Initiate an OAuth login."""
    return await _get_provider(request, provider).authorize_redirect(request)


@router.get("/{provider}/callback")
async def connect_callback(
    provider: str,
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    users: Annotated[UserService, Depends(get_user_service)],
) -> RedirectResponse:
    """Handle the provider's redirect back to us."""
    _get_provider(request, provider)
    settings = request.app.state.settings

    result = await authenticator.authenticate(provider, request, users)

    if isinstance(result, Error):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed",
        )
    if isinstance(result, Rejected):
        query = urlencode({"error": result.reason})
        return RedirectResponse(url=f"{settings.login_failure_url}?{query}", status_code=302)

    await login(request, authenticator, users, result.user)
    return RedirectResponse(url=settings.login_success_url, status_code=302)
