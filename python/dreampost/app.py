"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, CORS, request-id middleware, and routes.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures every response (including CORS rejections) gets X-Request-ID

Shared Resources (app.state):
- settings: the Settings the app was built with
- storage: StorageBase selected by DATABASE_URL (or injected)
- httpx_client: one httpx.AsyncClient for all provider calls
- generator: PostcardGenerator wrapping the shared client (or injected)

Resources the app creates itself are closed at shutdown. Injected
storage and generators belong to the caller and are left open.
"""

import json
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dreampost.api.routes import create_api_router
from dreampost.config import Settings, get_settings
from dreampost.errors import ApiError, ApiErrorCode
from dreampost.logging import configure_logging, get_logger
from dreampost.middleware.request_id import RequestIDMiddleware
from dreampost.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from dreampost.services.generator import PostcardGenerator, build_generator
from dreampost.storage import StorageBase, create_storage, seed_demo_data

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle resources.

    - Opens the store unless one was injected
    - Creates the shared httpx.AsyncClient and the generator
    - Seeds demo data when SEED_DEMO_DATA is set
    - Closes what it opened on shutdown
    """
    settings: Settings = app.state.settings

    owns_storage = app.state.storage is None
    if owns_storage:
        app.state.storage = create_storage(settings)
        logger.info(
            "storage_initialized",
            backend="sql" if settings.uses_sql_storage else "memory",
        )

    # Create shared HTTP client for provider calls
    app.state.httpx_client = httpx.AsyncClient(
        timeout=httpx.Timeout(60.0, connect=10.0),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )

    if app.state.generator is None:
        app.state.generator = build_generator(settings, app.state.httpx_client)
        logger.info(
            "generator_initialized",
            provider_enabled=bool(settings.openai_api_key),
            caption_model=settings.caption_model,
            image_model=settings.image_model,
        )

    if settings.seed_demo_data:
        seed_demo_data(app.state.storage)

    yield

    # Shutdown: close HTTP client, then the store if we opened it
    await app.state.httpx_client.aclose()
    logger.info("httpx_client_closed")
    if owns_storage:
        app.state.storage.close()
        logger.info("storage_closed")


def create_app(
    settings: Settings | None = None,
    storage: StorageBase | None = None,
    generator: PostcardGenerator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings (defaults to get_settings()).
        storage: Optional store to use instead of one built from settings (for testing).
        generator: Optional generator to use instead of the OpenAI-backed one (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(json_format=settings.log_json)

    app = FastAPI(
        title="Dreampost API",
        description="Backend API for Subconscious Postcards - sleep sounds turned into postcards",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.generator = generator

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Handle JSON parsing errors specifically
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (including malformed JSON)."""
        logger.info("request_validation_failed", error_count=len(exc.errors()))
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request"),
        )

    # Handle JSON decode errors from malformed JSON bodies
    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Catch JSON decode errors before they reach route handlers."""
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return JSONResponse(
                            status_code=400,
                            content=error_response(
                                ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"
                            ),
                        )
        return await call_next(request)

    # Use router factory to avoid import-time settings loading
    app.include_router(create_api_router())

    cors_origins = settings.cors_origin_list
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-Request-ID"],
            expose_headers=["X-Request-ID"],
        )
        logger.info("cors_middleware_enabled", origins=cors_origins)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
