import asyncio
from typing import Optional

from ..config import Settings
from ..core.errors import NotConfigured
from ..logger import get_logger
from .connection import DatabaseConnection
from .memory import MemoryScoreManager
from .score_manager import ScoreManager
from .store import ScoreStore

logger = get_logger(__name__)


def build_store(settings: Settings) -> Optional[ScoreStore]:
    """Store for the configured backend, or None when nothing is configured"""
    backend = settings.leaderboard.BACKEND.lower()
    if backend == 'memory':
        return MemoryScoreManager(settings.leaderboard.SNAPSHOT_PATH)
    if backend == 'postgres':
        if not settings.database.configured:
            return None
        return ScoreManager(DatabaseConnection(settings.database))
    if backend != 'none':
        logger.warning(f"Unknown leaderboard backend {backend!r}")
    return None


class DatabaseManager:
    """Owns the process-wide store: opened once at startup, closed at shutdown"""

    def __init__(self, settings: Settings, store: Optional[ScoreStore] = None):
        self.settings = settings
        self._store = store if store is not None else build_store(settings)
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return self._store is not None

    @property
    def available(self) -> bool:
        return self._initialized

    @property
    def store(self) -> ScoreStore:
        if not self._initialized:
            raise NotConfigured()
        return self._store

    async def initialize(self):
        async with self._lock:
            if self._initialized:
                return
            if self._store is None:
                logger.warning("No leaderboard store configured; endpoints will answer 503")
                return
            await self._store.initialize()
            self._initialized = True
            logger.info(f"Leaderboard store ready ({type(self._store).__name__})")

    async def close(self):
        async with self._lock:
            if not self._initialized:
                return
            self._initialized = False
            try:
                await self._store.close()
            finally:
                logger.info("Leaderboard store closed")
