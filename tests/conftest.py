import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from pulseboard.config import DatabaseConfig, LeaderboardConfig, Settings
from pulseboard.database.base import DatabaseManager
from pulseboard.database.memory import MemoryScoreManager
from pulseboard.main import create_app
from pulseboard.models.data import Difficulty, ScoreRec
from pulseboard.services.leaderboard import LeaderboardService


class FakeClock:
    """Millisecond clock that moves forward one second per reading"""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


def make_settings(**leaderboard) -> Settings:
    leaderboard.setdefault('BACKEND', 'memory')
    return Settings(
        database=DatabaseConfig(DSN=None, HOST=None),
        leaderboard=LeaderboardConfig(**leaderboard),
    )


def rec(name, score, acc_bp=10000, combo=0, ts=1, track_id='training-beat',
        diff=Difficulty.NORMAL) -> ScoreRec:
    return ScoreRec(track_id, diff, name, score, acc_bp, combo, ts)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def settings():
    return make_settings()


@pytest_asyncio.fixture()
async def service(settings, clock):
    db = DatabaseManager(settings)
    await db.initialize()
    yield LeaderboardService(db, settings.leaderboard, clock=clock)
    await db.close()


@pytest.fixture()
def store():
    return MemoryScoreManager()


@pytest.fixture()
def client(settings, clock):
    db = DatabaseManager(settings)
    service = LeaderboardService(db, settings.leaderboard, clock=clock)
    with TestClient(create_app(settings, db=db, service=service)) as test_client:
        yield test_client
