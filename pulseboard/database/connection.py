import asyncio
from contextlib import asynccontextmanager

import asyncpg

from ..config import DatabaseConfig
from ..logger import get_logger

logger = get_logger(__name__)

SCHEMA = '''
    CREATE TABLE IF NOT EXISTS leaderboard (
        track_id TEXT NOT NULL,
        diff SMALLINT NOT NULL DEFAULT 1,
        name TEXT NOT NULL,
        score INTEGER NOT NULL DEFAULT 0,
        acc_bp INTEGER NOT NULL DEFAULT 0 CHECK (acc_bp BETWEEN 0 AND 10000),
        combo INTEGER NOT NULL DEFAULT 0,
        ts BIGINT NOT NULL,
        PRIMARY KEY (track_id, diff, name)
    );
    CREATE INDEX IF NOT EXISTS leaderboard_rank_idx
    ON leaderboard (track_id, diff, score DESC, acc_bp DESC, combo DESC, ts ASC, name ASC);
'''


class DatabaseConnection:
    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool = None
        self._connection_semaphore = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self):
        """Create the pool and make sure the schema exists"""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:  # Double check after acquiring lock
                return

            try:
                self.pool = await asyncpg.create_pool(
                    **self._connect_args(),
                    ssl=self.config.ssl_mode(),
                    min_size=self.config.MIN_SIZE,
                    max_size=self.config.MAX_SIZE,
                    command_timeout=self.config.COMMAND_TIMEOUT,
                    max_inactive_connection_lifetime=300.0,
                    setup=self._setup_connection
                )
                self._connection_semaphore = asyncio.Semaphore(self.config.MAX_SIZE)

                async with self.pool.acquire() as conn:
                    await conn.execute(SCHEMA)

                self._initialized = True
                logger.info("Database connection initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize database connection: {e}")
                await self.close()
                raise

    def _connect_args(self) -> dict:
        # explicit keyword arguments would override the parts of a DSN
        if self.config.DSN:
            return {'dsn': self.config.DSN}
        return {
            'host': self.config.HOST,
            'port': self.config.PORT,
            'database': self.config.DATABASE,
            'user': self.config.USER,
            'password': self.config.PASSWORD,
        }

    async def _setup_connection(self, connection):
        """Per-connection timeouts; every statement is bounded"""
        timeout_ms = int(self.config.COMMAND_TIMEOUT * 1000)
        await connection.execute(f'SET statement_timeout = {timeout_ms}')
        await connection.execute(f'SET idle_in_transaction_session_timeout = {timeout_ms}')
        await connection.execute(f'SET lock_timeout = {timeout_ms}')

    @asynccontextmanager
    async def connection(self):
        """Pooled connection, released on every exit path"""
        if not self._initialized:
            raise RuntimeError("Database connection not initialized")
        async with self._connection_semaphore:
            async with self.pool.acquire() as conn:
                yield conn

    async def reset_schema(self):
        async with self.connection() as conn:
            async with conn.transaction():
                await conn.execute('DROP TABLE IF EXISTS leaderboard')
                await conn.execute(SCHEMA)
        logger.info("Leaderboard table reset")

    async def close(self):
        if self.pool:
            await self.pool.close()
            self.pool = None
        self._initialized = False
