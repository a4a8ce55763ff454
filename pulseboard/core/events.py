import asyncio

from fastapi import FastAPI

from ..logger import get_logger
from .errors import LeaderboardError

logger = get_logger(__name__)


async def startup_event(app: FastAPI):
    """Open the shared store; on failure the service keeps answering 503"""
    db = app.state.db
    try:
        await db.initialize()
        if db.available:
            logger.info("Database initialized")
    except LeaderboardError as e:
        logger.error(f"Failed to initialize leaderboard store: {e}")


async def shutdown_event(app: FastAPI):
    """Close the shared store"""
    db = app.state.db
    try:
        async with asyncio.timeout(5.0):
            await db.close()
            logger.info("Database connections closed")
    except TimeoutError:
        logger.warning("Shutdown timed out, store may not have flushed")
    except LeaderboardError as e:
        logger.error(f"Error during shutdown: {e}")
