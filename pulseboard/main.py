from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

from .config import Settings
from .core.errors import LeaderboardError, ValidationError
from .core.events import shutdown_event, startup_event
from .database.base import DatabaseManager
from .logger import get_logger
from .routes import health, leaderboard, score
from .services.leaderboard import LeaderboardService

logger = get_logger(__name__)


async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
    if isinstance(exc, ValidationError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
        message = exc.message
    else:
        message = exc.public_message
    return ORJSONResponse(status_code=exc.status_code, content={"ok": False, "error": message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return ORJSONResponse(status_code=400, content={"ok": False, "error": message})


def create_app(settings: Optional[Settings] = None, db: Optional[DatabaseManager] = None,
               service: Optional[LeaderboardService] = None) -> FastAPI:
    settings = settings or Settings()
    db = db or DatabaseManager(settings)
    service = service or LeaderboardService(db, settings.leaderboard)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup_event(app)
        try:
            yield
        finally:
            await shutdown_event(app)

    app = FastAPI(
        default_response_class=ORJSONResponse,
        title="Leaderboard Service",
        description="Per-track, per-difficulty best-score leaderboards on PostgreSQL",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.service = service

    app.add_exception_handler(LeaderboardError, leaderboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(health.router)
    app.include_router(score.router)
    app.include_router(leaderboard.router)
    return app


app = create_app()
