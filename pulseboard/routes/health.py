import time

from fastapi import APIRouter, Request

from ..models.response import HealthResponse

router = APIRouter()

# Track application start time
start_time = time.time()


@router.get("/health", response_model=HealthResponse)
@router.head("/health")
async def health_check(request: Request):
    """Liveness plus whether the score store is usable"""
    return HealthResponse(
        uptime=time.time() - start_time,
        store="ok" if request.app.state.db.available else "unavailable",
    )
