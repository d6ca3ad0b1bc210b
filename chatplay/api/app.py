# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the chatplay API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from chatplay.api.middleware import LogContextMiddleware
from chatplay.api.routes import health
from chatplay.api.v1 import create_v1_router
from chatplay.core.config import get_settings
from chatplay.domains.gaming.service import GameSessionService
from chatplay.infrastructure.database import (
    close_database,
    create_tables,
    get_sessionmaker,
    init_database,
)
from chatplay.infrastructure.database.game_store import SQLAlchemyGameStore
from chatplay.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Connects the database and builds the session engine on startup,
    unless a service was injected into create_app(). Closes the
    database on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting chatplay API: environment=%s, debug=%s",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    owns_database = getattr(app.state, "game_service", None) is None
    if owns_database:
        await init_database(settings)
        await create_tables()
        app.state.game_service = GameSessionService(
            store=SQLAlchemyGameStore(get_sessionmaker()),
            settings=settings,
        )
        logger.info("Database connection initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    if owns_database:
        await close_database()
        logger.info("Database connection closed")

    logger.info("Shutting down chatplay API")


def create_app(game_service: GameSessionService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        game_service: Session engine to serve. When omitted, one backed by
            the configured database is built at startup.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="chatplay API",
        description="Session-based turn engine for human-vs-AI chat games",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.game_service = game_service

    # =========================================================================
    # Middleware
    # =========================================================================
    app.add_middleware(LogContextMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(create_v1_router(settings.api.prefix))

    return app
