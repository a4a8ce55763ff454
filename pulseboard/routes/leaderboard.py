from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from ..logger import get_logger
from ..models.data import Difficulty
from ..models.response import LeaderboardRow, RankResponse
from ..services.leaderboard import LeaderboardService
from .deps import get_service

logger = get_logger(__name__)
router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("/{track_id}", response_model=List[LeaderboardRow])
async def get_leaders(
    track_id: str = Path(..., min_length=1),
    diff: Optional[str] = Query("normal", description="easy | normal | hard"),
    limit: Optional[int] = Query(None, description="Rows to return, clamped to 1..200"),
    service: LeaderboardService = Depends(get_service),
):
    """
    Best-first leaderboard for one track and difficulty.

    - **track_id**: Track identifier
    - **diff**: Difficulty, anything unrecognized reads as normal
    - **limit**: Number of rows (default 50)
    """
    records = await service.top(track_id, diff, limit)
    logger.debug(f"Returning {len(records)} rows for {track_id}/{Difficulty.parse(diff).label}")
    return [LeaderboardRow.from_record(rec) for rec in records]


@router.get("/{track_id}/players/{name}", response_model=RankResponse)
async def get_player_rank(
    track_id: str = Path(..., min_length=1),
    name: str = Path(..., min_length=1),
    diff: Optional[str] = Query("normal", description="easy | normal | hard"),
    service: LeaderboardService = Depends(get_service),
):
    """Rank and stored best of one player; rank is null when they have no record"""
    info = await service.rank_of(track_id, diff, name)
    return RankResponse.from_info(track_id, Difficulty.parse(diff).label, info)
