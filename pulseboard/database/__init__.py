from .base import DatabaseManager, build_store
from .memory import MemoryScoreManager
from .score_manager import ScoreManager
from .store import ScoreStore

__all__ = ['DatabaseManager', 'build_store', 'MemoryScoreManager', 'ScoreManager', 'ScoreStore']
