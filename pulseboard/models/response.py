from typing import List, Literal, Optional

from pydantic import BaseModel

from .data import RankInfo, ScoreRec


class LeaderboardRow(BaseModel):
    name: str
    score: int
    acc: float
    combo: int
    timestamp: int

    @classmethod
    def from_record(cls, rec: ScoreRec) -> 'LeaderboardRow':
        return cls(**rec.to_public())


class SubmitResponse(BaseModel):
    ok: Literal[True] = True
    rank: Optional[int]
    total: int
    pb: bool
    best: Optional[LeaderboardRow]


class RankResponse(BaseModel):
    trackId: str
    difficulty: str
    rank: Optional[int]
    total: int
    record: Optional[LeaderboardRow]

    @classmethod
    def from_info(cls, track_id: str, difficulty: str, info: RankInfo) -> 'RankResponse':
        return cls(
            trackId=track_id,
            difficulty=difficulty,
            rank=info.rank,
            total=info.total,
            record=LeaderboardRow.from_record(info.record) if info.record else None,
        )


class ErrorResponse(BaseModel):
    ok: Literal[False] = False
    error: str


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    uptime: float
    store: Literal["ok", "unavailable"]
