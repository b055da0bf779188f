"""Main FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from authlib.integrations.starlette_client import OAuth
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from coral_auth import __version__
from coral_auth.api import api_router, oauth_router
from coral_auth.auth.providers import register_providers
from coral_auth.auth.strategies import Authenticator, local_strategy
from coral_auth.config import Settings, get_settings
from coral_auth.constants import SESSION_COOKIE_NAME, SESSION_TIMEOUT_DAYS
from coral_auth.db import Database
from coral_auth.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, hsts: bool = False) -> None:
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


def build_authenticator(providers: dict) -> Authenticator:
    """Register the local strategy and one strategy per configured provider."""
    authenticator = Authenticator()
    authenticator.use(local_strategy())
    for provider in providers.values():
        authenticator.use(provider.strategy())
    return authenticator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    database: Database = app.state.db

    # Startup aborts if the database is unreachable
    await database.connect()

    yield

    await database.dispose()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use (default: loaded from the environment)
        database: Database handle to use (default: built from settings)
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )

    oauth = OAuth()
    providers = register_providers(settings, oauth)

    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)
    app.state.oauth_providers = providers
    app.state.authenticator = build_authenticator(providers)
    logger.info(f"Login strategies: {', '.join(app.state.authenticator.names)}")

    # Middleware (order matters - first added = last executed)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.app_secret_key,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=60 * 60 * 24 * SESSION_TIMEOUT_DAYS,
        same_site="lax",
        https_only=settings.is_production,
    )

    app.include_router(api_router)
    app.include_router(oauth_router)
    app.add_api_route("/health", health_check, tags=["monitoring"])

    return app


_app_start_time = datetime.now(UTC)


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers."""
    database: Database = request.app.state.db

    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - _app_start_time).total_seconds(),
        "version": __version__,
        "checks": {},
    }

    try:
        async with database.session() as db:
            await db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {"status": "healthy"}
    except Exception:
        logger.exception("Database health check failed")
        health_status["checks"]["database"] = {"status": "unhealthy"}
        health_status["status"] = "unhealthy"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)
