"""
Engine lifespan.

Embedding applications wrap their own lifetime in ``lifespan()`` to get the
database schema, the preset templates and the background scheduler.
"""

from contextlib import asynccontextmanager

from cadence.core.config import get_settings
from cadence.core.logger import logger


@asynccontextmanager
async def lifespan():
    """Startup/shutdown handler for the recurrence engine."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting cadence in {settings.ENVIRONMENT} mode...")

    from cadence.deps import get_recurrence_service
    from cadence.infrastructure.local.database import init_db

    await init_db()
    await get_recurrence_service().initialize()

    from cadence.services.background_scheduler import (
        start_background_scheduler,
        stop_background_scheduler,
    )

    await start_background_scheduler()

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down cadence...")
        await stop_background_scheduler()
