"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .database import init_db, close_db, get_db_context
from .cache import cache
from .logging import setup_logging
from .config import settings
from .seed import seed_demo_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    try:
        await init_db()

        if settings.SEED_DEMO_DATA:
            async with get_db_context() as db:
                await seed_demo_data(db)

        await cache.connect()

        logger.info(f"{settings.APP_NAME} started successfully")

        yield

    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")

        await close_db()
        await cache.disconnect()

        logger.info(f"{settings.APP_NAME} shutdown complete")
