import asyncio
import time
from typing import Callable, List, Optional, Set, Tuple

from ..config import LeaderboardConfig
from ..core.errors import StorageUnavailable
from ..core.sanitize import build_record, clean_name
from ..database.base import DatabaseManager
from ..database.store import Partition
from ..logger import get_logger
from ..models.data import Difficulty, RankInfo, ScoreRec, UpsertResult

logger = get_logger(__name__)


def epoch_ms() -> int:
    return int(time.time() * 1000)


class LeaderboardService:
    """Submission and query paths on top of the shared score store.

    A submission is upserted, its partition pruned, and only then ranked, so the
    reported rank reflects both writes. Partitions whose prune failed are kept
    in ``pending_prunes`` and retried after the next successful write.
    """

    def __init__(self, db: DatabaseManager, config: LeaderboardConfig,
                 clock: Callable[[], int] = epoch_ms):
        self.db = db
        self.config = config
        self.clock = clock
        self.pending_prunes: Set[Partition] = set()

    async def _call(self, operation: str, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.config.OPERATION_TIMEOUT)
        except asyncio.TimeoutError as e:
            logger.error(f"Leaderboard {operation} timed out after {self.config.OPERATION_TIMEOUT}s")
            raise StorageUnavailable(f"{operation} timed out") from e

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.config.DEFAULT_LIMIT
        return max(1, min(self.config.MAX_LIMIT, int(limit)))

    async def submit(self, payload: dict) -> Tuple[UpsertResult, RankInfo]:
        store = self.db.store
        rec = build_record(payload, self.clock(), self.config)

        result = await self._call('upsert_best', store.upsert_best(rec))
        if result.changed:
            logger.info(f"New best for {rec.name!r} on {rec.track_id}/{rec.diff.label}: "
                        f"score={rec.score} acc_bp={rec.acc_bp} combo={rec.combo}")
            await self.prune(rec.partition)
            await self.retry_pending_prunes()
        else:
            logger.debug(f"No improvement for {rec.name!r} on {rec.track_id}/{rec.diff.label}")

        info = await self._call('rank_of', store.rank_of(rec.track_id, rec.diff, rec.name))
        return result, info

    async def prune(self, partition: Partition, keep: Optional[int] = None) -> int:
        """Bound one partition; failures are logged and queued, never raised"""
        keep = keep or self.config.MAX_PER_PARTITION
        track_id, diff = partition
        try:
            deleted = await self._call(
                'prune_partition', self.db.store.prune_partition(track_id, diff, keep)
            )
        except StorageUnavailable as e:
            logger.error(f"Prune failed for {track_id}/{diff.label}, will retry: {e}")
            self.pending_prunes.add(partition)
            return 0
        self.pending_prunes.discard(partition)
        if deleted:
            logger.info(f"Pruned {deleted} records from {track_id}/{diff.label}")
        return deleted

    async def retry_pending_prunes(self):
        for partition in list(self.pending_prunes):
            await self.prune(partition)

    async def prune_all(self, keep: Optional[int] = None) -> int:
        partitions = await self._call('partitions', self.db.store.partitions())
        total = 0
        for partition in partitions:
            total += await self.prune(partition, keep)
        return total

    async def top(self, track_id: str, difficulty=None, limit: Optional[int] = None) -> List[ScoreRec]:
        store = self.db.store
        diff = Difficulty.parse(difficulty)
        return await self._call(
            'scan_top', store.scan_top(track_id.strip(), diff, self.clamp_limit(limit))
        )

    async def rank_of(self, track_id: str, difficulty, name: str) -> RankInfo:
        store = self.db.store
        diff = Difficulty.parse(difficulty)
        name = clean_name(name, self.config.NAME_MAX_LENGTH)
        return await self._call('rank_of', store.rank_of(track_id.strip(), diff, name))
