"""FastAPI dependencies for route handlers.

Shared objects (store, generator, settings) are created once at app
startup and read from app.state.
"""

from fastapi import Request

from dreampost.config import Settings
from dreampost.services.generator import PostcardGenerator
from dreampost.storage import StorageBase

__all__ = ["get_app_settings", "get_generator", "get_storage"]


def get_storage(request: Request) -> StorageBase:
    """Get the shared store from app state.

    Args:
        request: The incoming request (provides access to app.state)

    Returns:
        The StorageBase instance selected at startup.
    """
    return request.app.state.storage


def get_generator(request: Request) -> PostcardGenerator:
    """Get the shared postcard generator from app state.

    The generator wraps the app's httpx.AsyncClient, which is opened at
    startup and closed at shutdown.
    """
    return request.app.state.generator


def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was built with."""
    return request.app.state.settings
