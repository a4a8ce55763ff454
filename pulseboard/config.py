from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='POSTGRES_', extra='ignore', populate_by_name=True)

    DSN: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('POSTGRES_DSN', 'DATABASE_URL'),
    )
    HOST: Optional[str] = None
    PORT: int = 5432
    DATABASE: str = Field(
        default='leaderboard',
        validation_alias=AliasChoices('POSTGRES_DB', 'POSTGRES_DATABASE'),
    )
    USER: str = 'postgres'
    PASSWORD: str = 'postgres'
    SSL: str = 'auto'
    MIN_SIZE: int = 2
    MAX_SIZE: int = 20
    COMMAND_TIMEOUT: float = 10.0

    @property
    def configured(self) -> bool:
        return bool(self.DSN or self.HOST)

    def ssl_mode(self):
        """asyncpg ``ssl`` argument; hosted databases need TLS, localhost does not"""
        if self.SSL == 'disable':
            return False
        if self.SSL == 'require':
            return 'require'
        target = self.DSN or self.HOST or ''
        if 'localhost' in target or '127.0.0.1' in target:
            return False
        return 'require'


class LeaderboardConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='LEADERBOARD_', extra='ignore')

    BACKEND: str = 'postgres'
    MAX_PER_PARTITION: int = Field(default=100, ge=1)
    DEFAULT_LIMIT: int = 50
    MAX_LIMIT: int = 200
    NAME_MAX_LENGTH: int = 16
    SCORE_MAX: int = 2_147_483_647
    COMBO_MAX: int = 9999
    OPERATION_TIMEOUT: float = 5.0
    SNAPSHOT_PATH: Optional[str] = None


class Settings:
    def __init__(self, database: Optional[DatabaseConfig] = None,
                 leaderboard: Optional[LeaderboardConfig] = None):
        self.database = database or DatabaseConfig()
        self.leaderboard = leaderboard or LeaderboardConfig()

