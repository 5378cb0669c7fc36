"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vocab_srs import __version__
from vocab_srs.context import SRSContext
from vocab_srs.errors import (
    ConcurrentModificationError,
    ImportFormatError,
    InvalidRatingError,
    SessionStateError,
)
from vocab_srs.server import dependencies
from vocab_srs.server.dependencies import SessionRegistry
from vocab_srs.server.models import HealthResponse
from vocab_srs.server.routes import (
    cards_router,
    data_router,
    sessions_router,
    settings_router,
)
from vocab_srs.utils.config import get_config

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[Exception], int] = {
    InvalidRatingError: 422,
    SessionStateError: 409,
    ConcurrentModificationError: 409,
    ImportFormatError: 400,
}


def create_app(
    title: str = "vocab-srs",
    description: str = "FSRS spaced-repetition scheduler for vocabulary cards",
    cors_origins: list[str] | None = None,
    context: SRSContext | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        title: API title
        description: API description
        cors_origins: Allowed CORS origins (default: from config)
        context: Pre-built context to serve; when None one is opened from
            the environment config at startup and closed at shutdown

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        if context is None:
            ctx = await SRSContext.open(get_config())
        else:
            ctx = context
            await ctx.settings.reload()
        app.state.context = ctx
        app.state.sessions = SessionRegistry()
        app.state.deck_info = {}
        logger.info("Serving store %s", type(ctx.storage).__name__)
        yield
        if context is None:
            await ctx.close()

    app = FastAPI(
        title=title,
        description=description,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    if cors_origins is None:
        cors_origins = list(get_config().cors_origins)

    is_wildcard = cors_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=not is_wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def get_context() -> SRSContext:
        ctx: SRSContext = app.state.context
        return ctx

    async def get_sessions() -> SessionRegistry:
        sessions: SessionRegistry = app.state.sessions
        return sessions

    app.dependency_overrides[dependencies.get_context] = get_context
    app.dependency_overrides[dependencies.get_sessions] = get_sessions

    async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
        status = next(
            (code for exc_type, code in ERROR_STATUS.items() if isinstance(exc, exc_type)),
            500,
        )
        logger.debug("%s %s -> %d: %s", request.method, request.url.path, status, exc)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    for exc_type in ERROR_STATUS:
        app.add_exception_handler(exc_type, handle_domain_error)

    app.include_router(cards_router)
    app.include_router(sessions_router)
    app.include_router(settings_router)
    app.include_router(data_router)

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    # Root endpoint
    @app.get("/", tags=["health"])
    async def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {
            "name": title,
            "description": description,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app
