"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coral_auth.constants import DEBUG_NAMESPACE_DB, MIN_SECRET_KEY_LENGTH
from coral_auth.utils.logging import debug_enabled


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_secret_key: str
    app_name: str = "coral-auth"

    @field_validator("app_secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Ensure secret key is strong enough."""
        if len(v) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(
                f"APP_SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters long"
            )
        if v == "change-me-to-a-secure-random-string":
            raise ValueError("APP_SECRET_KEY must be changed from the default value")
        return v

    # Public URL the OAuth providers redirect back to
    root_url: str = "http://localhost:3000"

    @field_validator("root_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Where the browser lands after an OAuth login attempt
    login_success_url: str = "/"
    login_failure_url: str = "/login"

    # Database
    database_url: str

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Reject blank URLs so startup fails before any connection attempt."""
        if not v.strip():
            raise ValueError("DATABASE_URL must not be empty")
        return v.strip()

    # Debug namespaces, e.g. DEBUG=coral-auth:*
    debug: str = ""

    # Facebook OAuth
    facebook_app_id: str = ""
    facebook_app_secret: str = ""

    # Twitter OAuth 1.0a
    twitter_consumer_key: str = ""
    twitter_consumer_secret: str = ""

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def database_url_async(self) -> str:
        """Get async database URL (postgresql+asyncpg)."""
        url = self.database_url
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @property
    def db_debug_enabled(self) -> bool:
        """Whether verbose query logging was requested through DEBUG."""
        return debug_enabled(self.debug, DEBUG_NAMESPACE_DB)

    def oauth_callback_url(self, provider: str) -> str:
        """Callback URL registered with an OAuth provider."""
        return f"{self.root_url}/connect/{provider}/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
