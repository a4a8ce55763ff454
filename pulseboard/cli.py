"""Leaderboard maintenance commands.

    python -m pulseboard.cli reset-db
    python -m pulseboard.cli prune --max 100
"""
import argparse
import asyncio
from typing import Optional

from .config import Settings
from .core.errors import LeaderboardError
from .database.base import DatabaseManager
from .logger import get_logger
from .services.leaderboard import LeaderboardService

logger = get_logger(__name__)


async def _reset(db: DatabaseManager) -> int:
    await db.store.reset()
    print("Leaderboard reset")
    return 0


async def _prune(db: DatabaseManager, settings: Settings, keep: Optional[int]) -> int:
    service = LeaderboardService(db, settings.leaderboard)
    deleted = await service.prune_all(keep)
    if service.pending_prunes:
        print(f"Pruned {deleted} records, {len(service.pending_prunes)} partitions failed")
        return 1
    print(f"Pruned {deleted} records")
    return 0


async def run(args: argparse.Namespace, settings: Optional[Settings] = None) -> int:
    settings = settings or Settings()
    db = DatabaseManager(settings)
    try:
        await db.initialize()
        if args.command == 'reset-db':
            return await _reset(db)
        return await _prune(db, settings, args.max)
    except LeaderboardError as e:
        logger.error(f"{args.command} failed: {e}")
        return 2
    finally:
        await db.close()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Leaderboard store maintenance.")
    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('reset-db', help="Drop every record and recreate the schema")
    prune = sub.add_parser('prune', help="Bound every partition to the retention limit")
    prune.add_argument('--max', type=int, default=None,
                       help="Records kept per partition (defaults to LEADERBOARD_MAX_PER_PARTITION)")
    args = parser.parse_args(argv)
    if getattr(args, 'max', None) is not None and args.max < 1:
        parser.error("--max must be at least 1")
    return args


def main(argv=None) -> int:
    return asyncio.run(run(parse_args(argv)))


if __name__ == '__main__':
    raise SystemExit(main())
