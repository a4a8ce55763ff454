"""In-process score store.

Each partition is a ``SortedKeyList`` ordered by the ranking key next to a
dict for point lookups. None of the mutating methods await between reading a
record and writing it back, so on a single event loop every read-compare-write
runs to completion before another task can touch the same key.
"""
import json
import os
from collections import defaultdict
from typing import Dict, List, Optional

import aiofiles
import aiofiles.os
from sortedcontainers import SortedKeyList

from ..core.errors import StorageUnavailable
from ..core.ranking import rank_key, strictly_improves
from ..logger import get_logger
from ..models.data import Difficulty, RankInfo, ScoreRec, UpsertResult
from .store import Partition, ScoreStore

logger = get_logger(__name__)


class MemoryScoreManager(ScoreStore):
    def __init__(self, snapshot_path: Optional[str] = None):
        self.snapshot_path = snapshot_path
        self._records: Dict[tuple, ScoreRec] = {}
        self._partitions: Dict[Partition, SortedKeyList] = defaultdict(
            lambda: SortedKeyList(key=rank_key)
        )

    async def initialize(self):
        if self.snapshot_path and os.path.exists(self.snapshot_path):
            try:
                async with aiofiles.open(self.snapshot_path, 'r', encoding='utf-8') as f:
                    data = json.loads(await f.read())
            except (OSError, ValueError) as e:
                raise StorageUnavailable(f"cannot load snapshot {self.snapshot_path}: {e}") from e
            if not isinstance(data, list):
                raise StorageUnavailable(f"snapshot {self.snapshot_path} is not a list of records")
            try:
                records = [ScoreRec.from_dict(item) for item in data]
            except (KeyError, TypeError, ValueError) as e:
                raise StorageUnavailable(f"malformed record in snapshot {self.snapshot_path}: {e!r}") from e
            for rec in records:
                self._store(rec)
            logger.info(f"Loaded {len(self._records)} records from {self.snapshot_path}")

    async def close(self):
        await self.flush()

    async def flush(self):
        """Write every record to the snapshot file, replacing it atomically"""
        if not self.snapshot_path:
            return
        tmp_path = f"{self.snapshot_path}.tmp"
        payload = json.dumps([rec.to_dict() for rec in self._records.values()])
        try:
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.snapshot_path)
        except OSError as e:
            raise StorageUnavailable(f"cannot write snapshot {self.snapshot_path}: {e}") from e
        logger.info(f"Wrote {len(self._records)} records to {self.snapshot_path}")

    def _store(self, rec: ScoreRec):
        old = self._records.get(rec.key)
        partition = self._partitions[rec.partition]
        if old is not None:
            partition.remove(old)
        partition.add(rec)
        self._records[rec.key] = rec

    def _drop(self, rec: ScoreRec):
        del self._records[rec.key]
        partition = self._partitions[rec.partition]
        partition.remove(rec)
        if not partition:
            del self._partitions[rec.partition]

    async def get(self, track_id: str, diff: Difficulty, name: str) -> Optional[ScoreRec]:
        return self._records.get((track_id, Difficulty(diff), name))

    async def put(self, rec: ScoreRec):
        self._store(rec)

    async def scan_top(self, track_id: str, diff: Difficulty, limit: int) -> List[ScoreRec]:
        partition = self._partitions.get((track_id, Difficulty(diff)))
        if not partition:
            return []
        return list(partition.islice(0, limit))

    async def count_partition(self, track_id: str, diff: Difficulty) -> int:
        partition = self._partitions.get((track_id, Difficulty(diff)))
        return len(partition) if partition else 0

    async def upsert_best(self, rec: ScoreRec) -> UpsertResult:
        existing = self._records.get(rec.key)
        if existing is None:
            self._store(rec)
            return UpsertResult(rec, changed=True, inserted=True)
        if strictly_improves(rec, existing):
            self._store(rec)
            return UpsertResult(rec, changed=True)
        return UpsertResult(existing, changed=False)

    async def prune_partition(self, track_id: str, diff: Difficulty, keep: int) -> int:
        partition = self._partitions.get((track_id, Difficulty(diff)))
        if not partition or len(partition) <= keep:
            return 0
        victims = list(partition.islice(keep))
        for rec in victims:
            self._drop(rec)
        return len(victims)

    async def rank_of(self, track_id: str, diff: Difficulty, name: str) -> RankInfo:
        diff = Difficulty(diff)
        partition = self._partitions.get((track_id, diff))
        total = len(partition) if partition else 0
        rec = self._records.get((track_id, diff, name))
        if rec is None:
            return RankInfo(None, total)
        return RankInfo(partition.bisect_key_left(rank_key(rec)) + 1, total, rec)

    async def partitions(self) -> List[Partition]:
        return sorted(self._partitions)

    async def reset(self):
        self._records.clear()
        self._partitions.clear()
        await self.flush()
