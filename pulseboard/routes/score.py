from fastapi import APIRouter, Depends

from ..logger import get_logger
from ..models.response import LeaderboardRow, SubmitResponse
from ..models.score import SubmitRequest
from ..services.leaderboard import LeaderboardService
from .deps import get_service

logger = get_logger(__name__)
router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.post("/submit", response_model=SubmitResponse)
async def submit_score(data: SubmitRequest, service: LeaderboardService = Depends(get_service)):
    """
    Submit a finished run. The stored record only changes when this run
    ranks strictly higher than the player's previous best.

    - **trackId**: Track identifier (required)
    - **difficulty**: easy | normal | hard (default normal)
    - **name**: Display name, sanitized and cut to 16 characters
    - **score**, **acc** (0..1), **combo**: clamped into range
    """
    result, info = await service.submit(data.model_dump())
    return SubmitResponse(
        rank=info.rank,
        total=info.total,
        pb=result.changed,
        best=LeaderboardRow.from_record(info.record) if info.record else None,
    )
