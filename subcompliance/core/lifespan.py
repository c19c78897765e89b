"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of the compliance context, the Redis
cache and the DB engine dispose.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from subcompliance.application.context import build_compliance_context
from subcompliance.core.config import get_settings
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: compliance context (catalog validated eagerly; an
    invalid catalog aborts startup), Redis cache (if enabled).
    Shutdown order: cache disconnect, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    context = build_compliance_context(settings)
    app.state.compliance_context = context
    logger.info(
        "Compliance context ready: %d document types, expiring window %d days",
        len(context.catalog),
        context.expiring_window_days,
    )

    if settings.redis_enabled:
        from subcompliance.infrastructure.cache.redis_cache import CacheService

        cache = CacheService()
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        app.state.cache = None
        logger.info("Cache disconnected")

    from subcompliance.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
