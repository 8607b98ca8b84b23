"""
FastAPI application for the inkpress platform.

This is the HTTP API the frontend talks to. `create_app` builds an app
around a settings object and a document store; the module-level `app`
uses environment settings and the in-memory store.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkpress import __version__
from inkpress.api import auth, posts, users
from inkpress.api.responses import install_error_handlers
from inkpress.auth.jwt import TokenService
from inkpress.config import Settings, configure_logging, get_settings
from inkpress.integrations.sentry import init_sentry
from inkpress.services import Accounts
from inkpress.storage import DocumentStore, create_local_storage

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    """Build the API around the given collaborators."""
    settings = settings or get_settings()
    settings.check()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup app resources."""
        configure_logging(settings)
        if init_sentry(settings):
            logger.info("Sentry error tracking enabled")
        if settings.bootstrap_admin:
            await Accounts(app.state.store).ensure_admin(
                settings.admin_username, settings.admin_email, settings.admin_password
            )
        logger.info(f"Inkpress API starting in {settings.environment} mode")

        yield

        logger.info("Inkpress API shutting down")

    app = FastAPI(
        title="Inkpress API",
        description="Blogging platform: authors, posts, likes and comments",
        version=__version__,
        lifespan=lifespan,
    )

    # Collaborators shared by every request
    app.state.settings = settings
    app.state.store = store if store is not None else create_local_storage()
    app.state.tokens = TokenService.from_settings(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Include routers
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(users.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "inkpress-api", "environment": settings.environment}

    return app


app = create_app()
