"""
Configuration - every tunable of the portal, read from the environment or .env.

Database selection:
- DATABASE_URL wins when set (SQLite works for local runs and the test suite)
- otherwise a PostgreSQL URL is assembled from the POSTGRES_* variables
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: Optional[str] = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "portal"
    postgres_password: str = "portal"
    postgres_db: str = "placement_portal"

    # Tokens
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 24 * 60

    # Seconds a client keeps the signed-in user's profile before refetching
    profile_cache_ttl_seconds: int = 300

    # Server
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
