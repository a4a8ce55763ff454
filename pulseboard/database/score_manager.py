import asyncio
from contextlib import asynccontextmanager, contextmanager
from typing import List, Optional

import asyncpg

from ..core.errors import StorageUnavailable
from ..logger import get_logger
from ..models.data import Difficulty, RankInfo, ScoreRec, UpsertResult
from .connection import DatabaseConnection
from .store import Partition, ScoreStore

logger = get_logger(__name__)

COLUMNS = 'track_id, diff, name, score, acc_bp, combo, ts'
RANK_ORDER = 'score DESC, acc_bp DESC, combo DESC, ts ASC, name ASC'

STORAGE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


def _record(row) -> ScoreRec:
    return ScoreRec(
        track_id=row['track_id'],
        diff=Difficulty(row['diff']),
        name=row['name'],
        score=row['score'],
        acc_bp=row['acc_bp'],
        combo=row['combo'],
        ts=row['ts'],
    )


def _params(rec: ScoreRec):
    return (rec.track_id, int(rec.diff), rec.name, rec.score, rec.acc_bp, rec.combo, rec.ts)


@contextmanager
def storage_errors(operation: str):
    """Translate driver and network failures into ``StorageUnavailable``"""
    try:
        yield
    except STORAGE_ERRORS as e:
        logger.error(f"Database error during {operation}: {e!r}")
        raise StorageUnavailable(f"{operation} failed: {e}") from e


class ScoreManager(ScoreStore):
    """PostgreSQL score store on a shared asyncpg pool"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    async def initialize(self):
        try:
            with storage_errors('initialize'):
                await self.db.initialize()
        except ValueError as e:
            # asyncpg rejects an unparseable DSN or connect option this way
            logger.error(f"Invalid database configuration: {e}")
            raise StorageUnavailable(f"invalid database configuration: {e}") from e

    async def close(self):
        await self.db.close()

    @asynccontextmanager
    async def _conn(self, operation: str):
        with storage_errors(operation):
            async with self.db.connection() as conn:
                yield conn

    async def get(self, track_id: str, diff: Difficulty, name: str) -> Optional[ScoreRec]:
        async with self._conn('get') as conn:
            row = await conn.fetchrow(f'''
                SELECT {COLUMNS}
                FROM leaderboard
                WHERE track_id = $1 AND diff = $2 AND name = $3
            ''', track_id, int(diff), name)
        return _record(row) if row else None

    async def put(self, rec: ScoreRec):
        async with self._conn('put') as conn:
            await conn.execute(f'''
                INSERT INTO leaderboard ({COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (track_id, diff, name)
                DO UPDATE SET
                    score = EXCLUDED.score,
                    acc_bp = EXCLUDED.acc_bp,
                    combo = EXCLUDED.combo,
                    ts = EXCLUDED.ts
            ''', *_params(rec))

    async def scan_top(self, track_id: str, diff: Difficulty, limit: int) -> List[ScoreRec]:
        async with self._conn('scan_top') as conn:
            rows = await conn.fetch(f'''
                SELECT {COLUMNS}
                FROM leaderboard
                WHERE track_id = $1 AND diff = $2
                ORDER BY {RANK_ORDER}
                LIMIT $3
            ''', track_id, int(diff), limit)
        return [_record(row) for row in rows]

    async def count_partition(self, track_id: str, diff: Difficulty) -> int:
        async with self._conn('count_partition') as conn:
            return await conn.fetchval('''
                SELECT COUNT(*)
                FROM leaderboard
                WHERE track_id = $1 AND diff = $2
            ''', track_id, int(diff))

    async def upsert_best(self, rec: ScoreRec) -> UpsertResult:
        # The row lock taken by ON CONFLICT serializes writers on one key and
        # the WHERE clause is re-checked against the latest row version, so
        # all four ranked fields are replaced together or not at all.
        async with self._conn('upsert_best') as conn:
            row = await conn.fetchrow(f'''
                INSERT INTO leaderboard AS lb ({COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (track_id, diff, name)
                DO UPDATE SET
                    score = EXCLUDED.score,
                    acc_bp = EXCLUDED.acc_bp,
                    combo = EXCLUDED.combo,
                    ts = EXCLUDED.ts
                WHERE (EXCLUDED.score, EXCLUDED.acc_bp, EXCLUDED.combo, -EXCLUDED.ts)
                    > (lb.score, lb.acc_bp, lb.combo, -lb.ts)
                RETURNING (xmax = 0) AS inserted
            ''', *_params(rec))
            if row is not None:
                return UpsertResult(rec, changed=True, inserted=row['inserted'])

            current = await conn.fetchrow(f'''
                SELECT {COLUMNS}
                FROM leaderboard
                WHERE track_id = $1 AND diff = $2 AND name = $3
            ''', rec.track_id, int(rec.diff), rec.name)
        return UpsertResult(_record(current) if current else None, changed=False)

    async def prune_partition(self, track_id: str, diff: Difficulty, keep: int) -> int:
        # Rows are compared against the last kept row on their own columns, so a
        # row improved by a concurrent upsert is re-checked and survives.
        async with self._conn('prune_partition') as conn:
            status = await conn.execute(f'''
                WITH boundary AS (
                    SELECT score, acc_bp, combo, ts, name
                    FROM leaderboard
                    WHERE track_id = $1 AND diff = $2
                    ORDER BY {RANK_ORDER}
                    OFFSET $3
                    LIMIT 1
                )
                DELETE FROM leaderboard AS lb
                USING boundary AS b
                WHERE lb.track_id = $1 AND lb.diff = $2
                  AND (
                    (lb.score, lb.acc_bp, lb.combo, -lb.ts) < (b.score, b.acc_bp, b.combo, -b.ts)
                    OR ((lb.score, lb.acc_bp, lb.combo, lb.ts) = (b.score, b.acc_bp, b.combo, b.ts)
                        AND lb.name > b.name)
                  )
            ''', track_id, int(diff), keep - 1)
        return int(status.split()[-1])

    async def rank_of(self, track_id: str, diff: Difficulty, name: str) -> RankInfo:
        async with self._conn('rank_of') as conn:
            async with conn.transaction(isolation='repeatable_read', readonly=True):
                row = await conn.fetchrow(f'''
                    SELECT {COLUMNS}
                    FROM leaderboard
                    WHERE track_id = $1 AND diff = $2 AND name = $3
                ''', track_id, int(diff), name)
                if row is None:
                    total = await conn.fetchval('''
                        SELECT COUNT(*)
                        FROM leaderboard
                        WHERE track_id = $1 AND diff = $2
                    ''', track_id, int(diff))
                    return RankInfo(None, total)

                counts = await conn.fetchrow('''
                    SELECT
                        COUNT(*) AS total,
                        COUNT(*) FILTER (WHERE
                            (score, acc_bp, combo, -ts)
                                > ($3::integer, $4::integer, $5::integer, -$6::bigint)
                            OR ((score, acc_bp, combo, ts)
                                = ($3::integer, $4::integer, $5::integer, $6::bigint)
                                AND name < $7::text)
                        ) AS ahead
                    FROM leaderboard
                    WHERE track_id = $1 AND diff = $2
                ''', track_id, int(diff), row['score'], row['acc_bp'], row['combo'],
                    row['ts'], name)
        return RankInfo(counts['ahead'] + 1, counts['total'], _record(row))

    async def partitions(self) -> List[Partition]:
        async with self._conn('partitions') as conn:
            rows = await conn.fetch('''
                SELECT DISTINCT track_id, diff
                FROM leaderboard
                ORDER BY track_id, diff
            ''')
        return [(row['track_id'], Difficulty(row['diff'])) for row in rows]

    async def reset(self):
        with storage_errors('reset'):
            await self.db.reset_schema()
