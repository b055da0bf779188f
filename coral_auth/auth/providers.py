"""OAuth provider registrations using Authlib."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from authlib.integrations.base_client import OAuthError
from authlib.integrations.starlette_client import OAuth
from fastapi import Request
from starlette.responses import RedirectResponse

from coral_auth.auth.strategies import Strategy, oauth_strategy
from coral_auth.config import Settings
from coral_auth.constants import (
    FACEBOOK_AUTHORIZE_URL,
    FACEBOOK_GRAPH_URL,
    GOOGLE_DISCOVERY_URL,
    HTTPX_TIMEOUT,
    PROVIDER_FACEBOOK,
    PROVIDER_GOOGLE,
    PROVIDER_TWITTER,
    TWITTER_ACCESS_TOKEN_URL,
    TWITTER_API_BASE_URL,
    TWITTER_AUTHORIZE_URL,
    TWITTER_REQUEST_TOKEN_URL,
)
from coral_auth.exceptions import StrategyRejection
from coral_auth.models.schemas import ExternalProfile
from coral_auth.utils.logging import get_logger

logger = get_logger(__name__)

# Provider errors that mean "the user did not log in" rather than a failure
REJECTION_ERRORS = {"access_denied", "mismatching_state"}


@dataclass(frozen=True)
class OAuthProviderConfig:
    """Static credentials and callback for one provider."""

    name: str
    client_id: str
    client_secret: str
    callback_url: str


class OAuthProvider(ABC):
    """Base class for an Authlib-backed login provider.

    Subclasses declare the Authlib registration and map the provider's user
    document onto an ``ExternalProfile``.
    """

    name: ClassVar[str]
    register_kwargs: ClassVar[dict[str, Any]] = {}

    def __init__(self, config: OAuthProviderConfig, oauth: OAuth) -> None:
        self.config = config
        self.client = oauth.register(
            name=config.name,
            client_id=config.client_id,
            client_secret=config.client_secret,
            **self.register_kwargs,
        )

    async def authorize_redirect(self, request: Request) -> RedirectResponse:
        """Send the browser to the provider's consent page."""
        return await self.client.authorize_redirect(request, self.config.callback_url)

    async def fetch_profile(self, request: Request) -> ExternalProfile:
        """Complete the callback and return the provider profile.

        Raises:
            StrategyRejection: If the user denied access or the flow is stale
        """
        self._check_denied(request)
        try:
            token = await self.client.authorize_access_token(request)
        except OAuthError as e:
            if e.error in REJECTION_ERRORS:
                raise StrategyRejection(e.description or e.error) from e
            raise
        data = await self.fetch_user_info(token)
        return self.to_profile(data)

    def _check_denied(self, request: Request) -> None:
        error = request.query_params.get("error")
        if error == "access_denied":
            raise StrategyRejection(
                request.query_params.get("error_description") or "access denied"
            )

    @abstractmethod
    async def fetch_user_info(self, token: dict[str, Any]) -> dict[str, Any]:
        """Fetch the provider's user document for an access token."""

    @abstractmethod
    def to_profile(self, data: dict[str, Any]) -> ExternalProfile:
        """Map the provider's user document onto an ExternalProfile."""

    def strategy(self) -> Strategy[ExternalProfile]:
        return oauth_strategy(self.name, self.fetch_profile)


class FacebookProvider(OAuthProvider):
    name = PROVIDER_FACEBOOK
    register_kwargs = {
        "access_token_url": f"{FACEBOOK_GRAPH_URL}oauth/access_token",
        "authorize_url": FACEBOOK_AUTHORIZE_URL,
        "api_base_url": FACEBOOK_GRAPH_URL,
        "client_kwargs": {"scope": "email public_profile", "timeout": HTTPX_TIMEOUT},
    }

    async def fetch_user_info(self, token: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.get(
            "me", params={"fields": "id,name,email,picture"}, token=token
        )
        response.raise_for_status()
        return response.json()

    def to_profile(self, data: dict[str, Any]) -> ExternalProfile:
        picture = (data.get("picture") or {}).get("data") or {}
        return ExternalProfile(
            provider=self.name,
            id=str(data["id"]),
            display_name=data.get("name"),
            email=data.get("email"),
            avatar_url=picture.get("url"),
        )


class TwitterProvider(OAuthProvider):
    """Twitter uses OAuth 1.0a; the consumer key/secret act as client id/secret."""

    name = PROVIDER_TWITTER
    register_kwargs = {
        "request_token_url": TWITTER_REQUEST_TOKEN_URL,
        "access_token_url": TWITTER_ACCESS_TOKEN_URL,
        "authorize_url": TWITTER_AUTHORIZE_URL,
        "api_base_url": TWITTER_API_BASE_URL,
        "client_kwargs": {"timeout": HTTPX_TIMEOUT},
    }

    def _check_denied(self, request: Request) -> None:
        # OAuth 1.0a reports a cancelled dialog with ?denied=<token>
        if "denied" in request.query_params:
            raise StrategyRejection("access denied")

    async def fetch_user_info(self, token: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.get(
            "account/verify_credentials.json",
            params={"include_email": "true", "skip_status": "true"},
            token=token,
        )
        response.raise_for_status()
        return response.json()

    def to_profile(self, data: dict[str, Any]) -> ExternalProfile:
        return ExternalProfile(
            provider=self.name,
            id=str(data.get("id_str") or data["id"]),
            display_name=data.get("name") or data.get("screen_name"),
            email=data.get("email"),
            # Twitter only returns addresses the account has confirmed
            email_verified=bool(data.get("email")),
            avatar_url=data.get("profile_image_url_https"),
        )


class GoogleProvider(OAuthProvider):
    name = PROVIDER_GOOGLE
    register_kwargs = {
        "server_metadata_url": GOOGLE_DISCOVERY_URL,
        "client_kwargs": {"scope": "openid email profile", "timeout": HTTPX_TIMEOUT},
    }

    async def fetch_user_info(self, token: dict[str, Any]) -> dict[str, Any]:
        # The parsed ID token carries the profile when the openid scope is granted
        userinfo = token.get("userinfo")
        if userinfo:
            return dict(userinfo)
        return dict(await self.client.userinfo(token=token))

    def to_profile(self, data: dict[str, Any]) -> ExternalProfile:
        return ExternalProfile(
            provider=self.name,
            id=str(data["sub"]),
            display_name=data.get("name"),
            email=data.get("email"),
            email_verified=data.get("email_verified") in (True, "true"),
            avatar_url=data.get("picture"),
        )


PROVIDER_CLASSES: dict[str, type[OAuthProvider]] = {
    cls.name: cls for cls in (FacebookProvider, TwitterProvider, GoogleProvider)
}


def provider_configs(settings: Settings) -> list[OAuthProviderConfig]:
    """Build the configuration of every provider that has credentials set."""
    credentials = {
        PROVIDER_FACEBOOK: (settings.facebook_app_id, settings.facebook_app_secret),
        PROVIDER_TWITTER: (settings.twitter_consumer_key, settings.twitter_consumer_secret),
        PROVIDER_GOOGLE: (settings.google_client_id, settings.google_client_secret),
    }

    configs = []
    for name, (client_id, client_secret) in credentials.items():
        if not client_id or not client_secret:
            logger.info(f"{name} login not configured, skipping")
            continue
        configs.append(
            OAuthProviderConfig(
                name=name,
                client_id=client_id,
                client_secret=client_secret,
                callback_url=settings.oauth_callback_url(name),
            )
        )
    return configs


def register_providers(settings: Settings, oauth: OAuth) -> dict[str, OAuthProvider]:
    """Register every configured provider with the Authlib registry."""
    return {
        config.name: PROVIDER_CLASSES[config.name](config, oauth)
        for config in provider_configs(settings)
    }
