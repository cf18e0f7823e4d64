"""Kondo API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map KondoError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Store and generation provider created by the lifespan and held on app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - No module-level engine: app.state handles are injected into services per request
      (ADR: no process-wide singleton, tests swap handles via dependency_overrides)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kondo.api.error_handlers import register_error_handlers
from kondo.api.routes import (
    artifacts, content_items, health, imports, posts, streaks, users,
)
from kondo.config import get_settings
from kondo.infrastructure.database import DatabaseSessionManager
from kondo.infrastructure.generation_provider import GenerationProviderClient
from kondo.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    app.state.store = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.provider = GenerationProviderClient.from_settings(settings)
    logger.info("Kondo API started")
    yield
    logger.info("Kondo API shutting down")
    await app.state.provider.close()
    await app.state.store.dispose()


app = FastAPI(title="Kondo API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(posts.router)
app.include_router(imports.router)
app.include_router(content_items.router)
app.include_router(artifacts.router)
app.include_router(streaks.router)
app.include_router(users.router)

register_error_handlers(app)
