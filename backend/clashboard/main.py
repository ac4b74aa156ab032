"""Main FastAPI application for the Clashboard backend."""

from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clashboard import __version__
from clashboard.core import db_manager, get_global_settings
from clashboard.core.logging import setup_logging
from clashboard.features.analytics.router import router as analytics_router
from clashboard.features.battles.router import router as battles_router
from clashboard.features.goals.router import router as goals_router
from clashboard.features.sync.router import router as sync_router

settings = get_global_settings()
setup_logging(settings.log_level, json_logs=settings.log_json)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("application_starting", environment=settings.environment)
    yield
    logger.info("application_stopping")
    await db_manager.close()


# OpenAPI tags metadata
tags_metadata = [
    {
        "name": "battles",
        "description": "Ingest raw battle logs and read the retained battle history.",
    },
    {
        "name": "analytics",
        "description": "Push sessions, battle stats, tilt state and daily summaries.",
    },
    {
        "name": "goals",
        "description": "User goals advanced automatically on sync.",
    },
    {
        "name": "sync",
        "description": "Full player sync: storage, analytics and goal progress.",
    },
    {
        "name": "health",
        "description": "Health check and system status endpoints.",
    },
]

app = FastAPI(
    title="Clashboard - Battle Analytics Service",
    description="""
    Battle analytics for Clash Royale players.

    ## Features

    * **Battle History**: Idempotent storage keyed by battle content, with tier retention
    * **Push Sessions**: Battles grouped by the gaps between them
    * **Tilt**: Loss-streak risk that decays while the player takes a break
    * **Goals**: Trophy, win-rate and win-streak goals advanced on every sync
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(battles_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(goals_router, prefix="/api/v1")
app.include_router(sync_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Used by monitoring tools and load balancers to check that the service is
    running.
    """
    return {
        "status": "healthy",
        "message": "Application is running",
        "version": __version__,
        "debug": settings.debug,
    }
