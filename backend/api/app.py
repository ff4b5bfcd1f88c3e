"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from shared.config import Settings, get_settings

from .dependencies import init_container
from .errors import register_exception_handlers
from .routes import auth, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings: Settings = app.state.settings
    logger.info(
        f"Starting {settings.app_name} on {settings.host}:{settings.port} "
        f"(record store: {settings.record_store})"
    )
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to run with. Defaults to the process-wide settings.

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    init_container(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Links Steam and Discord identities to one user and issues session credentials",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Session cookie for the login / link round trip
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    register_exception_handlers(app)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/auth", tags=["auth"])

    return app


# Application instance for uvicorn
app = create_app()
