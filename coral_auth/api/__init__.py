"""API routers."""

from coral_auth.api.router import api_router, oauth_router

__all__ = ["api_router", "oauth_router"]
