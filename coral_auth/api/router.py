"""Main API router."""

from fastapi import APIRouter

from coral_auth.api.auth import router as auth_router
from coral_auth.api.connect import router as connect_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

# Provider callbacks are registered as <ROOT_URL>/connect/<provider>/callback
oauth_router = APIRouter(prefix="/connect", tags=["oauth"])
oauth_router.include_router(connect_router)
