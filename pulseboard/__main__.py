import os

import uvicorn

from .logger import get_logger

logger = get_logger(__name__)


def main():
    host = os.getenv('HOST', '0.0.0.0')
    port = int(os.getenv('PORT', 8000))
    logger.info(f"Starting leaderboard service on {host}:{port}")
    uvicorn.run("pulseboard.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
