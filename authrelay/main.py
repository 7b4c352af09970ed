"""Main FastAPI application."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from authrelay import __version__
from authrelay.api import api_router
from authrelay.api.user import config_presence
from authrelay.auth import InMemorySessionStore, SessionStore, build_providers
from authrelay.config import Settings, get_settings
from authrelay.constants import SESSION_COOKIE_NAME, SESSION_MAX_AGE, SESSION_PURGE_INTERVAL
from authrelay.exceptions import NotAuthenticatedError
from authrelay.utils.logging import setup_logging
from authrelay.web import web_router

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, production: bool = False) -> None:
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "img-src 'self' https: data:; "
            "frame-ancestors 'none';"
        )
        # HSTS (only in production)
        if self.production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


async def periodic_session_purge(
    store: InMemorySessionStore, shutdown_event: asyncio.Event
) -> None:
    """Background task that drops expired sessions from memory."""
    while not shutdown_event.is_set():
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=SESSION_PURGE_INTERVAL)
            break  # Shutdown requested
        except TimeoutError:
            pass

        removed = store.purge_expired()
        if removed:
            logger.info(f"Purged {removed} expired sessions ({len(store)} active)")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    logger.info("Environment variables check:")
    for var, presence in config_presence(settings).items():
        logger.info(f"{var}: {presence}")
    logger.info(f"PORT: {settings.port}")

    shutdown_event = asyncio.Event()
    purge_task = None
    store = app.state.session_store
    if isinstance(store, InMemorySessionStore):
        purge_task = asyncio.create_task(
            periodic_session_purge(store, shutdown_event),
            name="session_purge",
        )

    yield

    # Graceful shutdown
    shutdown_event.set()
    if purge_task is not None:
        await purge_task
    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    session_store: SessionStore | None = None,
) -> FastAPI:
    """Build the application around one immutable settings object."""
    settings = settings if settings is not None else get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_store = session_store if session_store is not None else InMemorySessionStore()
    app.state.providers = build_providers(settings)
    app.state.started_at = datetime.now(UTC)

    # Middleware (order matters - first added = last executed)
    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)

    # Only the front-end origin may call the API with its cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Front-end and backend live on different sites in production
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=SESSION_MAX_AGE,
        same_site="none" if settings.is_production else "lax",
        https_only=settings.is_production,
    )

    app.include_router(api_router)
    app.include_router(web_router)

    @app.exception_handler(NotAuthenticatedError)
    async def unauthenticated_handler(request: Request, exc: NotAuthenticatedError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": "Not authenticated"})

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        """Structured body for unmatched routes."""
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "path": request.url.path},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    async def root() -> dict:
        """Liveness message."""
        return {"message": "OAuth Server Running"}

    @app.get("/health", tags=["monitoring"])
    async def health_check() -> dict:
        """Health check endpoint for monitoring and load balancers."""
        now = datetime.now(UTC)
        return {
            "status": "healthy",
            "timestamp": now.isoformat(),
            "uptime_seconds": (now - app.state.started_at).total_seconds(),
            "version": __version__,
        }

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on PORT."""
    settings = get_settings()
    setup_logging(settings)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
