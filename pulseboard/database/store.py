from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..models.data import Difficulty, RankInfo, ScoreRec, UpsertResult

Partition = Tuple[str, Difficulty]


class ScoreStore(ABC):
    """Keyed storage of one best record per (track, difficulty, player)"""

    async def initialize(self):
        pass

    async def close(self):
        pass

    @abstractmethod
    async def get(self, track_id: str, diff: Difficulty, name: str) -> Optional[ScoreRec]:
        ...

    @abstractmethod
    async def put(self, rec: ScoreRec):
        """Unconditional overwrite of the record's slot"""

    @abstractmethod
    async def scan_top(self, track_id: str, diff: Difficulty, limit: int) -> List[ScoreRec]:
        ...

    @abstractmethod
    async def count_partition(self, track_id: str, diff: Difficulty) -> int:
        ...

    @abstractmethod
    async def upsert_best(self, rec: ScoreRec) -> UpsertResult:
        """Insert, or replace all ranked fields at once if ``rec`` strictly improves"""

    @abstractmethod
    async def prune_partition(self, track_id: str, diff: Difficulty, keep: int) -> int:
        """Delete every record ranked below ``keep``; returns the number deleted"""

    @abstractmethod
    async def rank_of(self, track_id: str, diff: Difficulty, name: str) -> RankInfo:
        ...

    @abstractmethod
    async def partitions(self) -> List[Partition]:
        ...

    @abstractmethod
    async def reset(self):
        """Drop every record"""
