from fastapi import Request

from ..services.leaderboard import LeaderboardService


def get_service(request: Request) -> LeaderboardService:
    return request.app.state.service
