"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from dreampost.api.routes.health import router as health_router
from dreampost.api.routes.postcards import router as postcards_router
from dreampost.api.routes.trades import router as trades_router
from dreampost.api.routes.users import router as users_router

API_PREFIX = "/api"


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered. Health lives at
        /health; everything else is under /api.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(postcards_router, prefix=API_PREFIX)
    api_router.include_router(trades_router, prefix=API_PREFIX)
    api_router.include_router(users_router, prefix=API_PREFIX)
    return api_router


__all__ = ["create_api_router"]
